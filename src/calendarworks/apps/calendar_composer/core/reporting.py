"""Report generation for calendar composer runs."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from .models import PairResult


def write_jsonl(results: Sequence[PairResult], path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        for result in results:
            handle.write(json.dumps(result.to_json()))
            handle.write("\n")
