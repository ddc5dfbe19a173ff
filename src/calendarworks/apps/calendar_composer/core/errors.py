"""Failure conditions raised by the calendar composer pipeline."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ComposerError(RuntimeError):
    """Base class for every failure the composer records against a pair."""

    kind = "composer_error"

    def __init__(self, message: str, *, path: Optional[Path] = None) -> None:
        super().__init__(message)
        self.path = path


class NotFoundError(ComposerError):
    kind = "not_found"


class MismatchSizeError(ComposerError):
    kind = "mismatch_size"

    def __init__(self, top: Path, top_width: int, bottom: Path, bottom_width: int) -> None:
        super().__init__(
            f"Width mismatch: {top.name} is {top_width}px wide, "
            f"{bottom.name} is {bottom_width}px wide"
        )
        self.top_width = top_width
        self.bottom_width = bottom_width


class CouldntSaveFileError(ComposerError):
    kind = "couldnt_save_file"


class PaletteIndexOutOfRangeError(ComposerError):
    kind = "palette_index_out_of_range"

    def __init__(self, index: int, palette_length: int, *, path: Optional[Path] = None) -> None:
        source = f" for {path.name}" if path is not None else ""
        super().__init__(
            f"Palette index {index} out of range{source}: "
            f"quantizer produced {palette_length} entries",
            path=path,
        )
        self.index = index
        self.palette_length = palette_length


class FontLoadError(ComposerError):
    kind = "font_load"


class OutputCollisionError(ComposerError):
    kind = "output_collision"
