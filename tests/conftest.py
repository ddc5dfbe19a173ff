import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from calendarworks.logging_utils import LOG_DIR_ENV, reset_logging  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_log_dir(tmp_path, monkeypatch):
    """Keep CLI runs from writing log files into the project tree.

    Handlers installed by configure_logging are dropped once the test ends so
    later tests never log into a stream the CLI runner has closed.
    """

    log_dir = tmp_path / "logs"
    monkeypatch.setenv(LOG_DIR_ENV, str(log_dir))
    yield log_dir
    reset_logging()
