"""Calendar composer: month/image composites with palette-coloured year labels."""

from .core.config import ComposerConfig, ComposerSettings, build_runtime_config, load_config  # noqa: F401
from .core.errors import (  # noqa: F401
    ComposerError,
    CouldntSaveFileError,
    FontLoadError,
    MismatchSizeError,
    NotFoundError,
    OutputCollisionError,
    PaletteIndexOutOfRangeError,
)
from .core.models import BatchSummary, ColorPair, ImagePair, PairResult, PairStatus, TextLabel  # noqa: F401
from .core.runner import ComposerRunner  # noqa: F401
