"""Decode and encode helpers shared by the compositor and the overlay."""

from __future__ import annotations

import logging
import struct
import zlib
from pathlib import Path

from PIL import Image

from .errors import CouldntSaveFileError, NotFoundError

logger = logging.getLogger(__name__)


def open_rgba(path: Path) -> Image.Image:
    """Load *path* fully into memory as an RGBA image."""

    try:
        with Image.open(path) as handle:
            return handle.convert("RGBA")
    except (
        OSError,
        ValueError,
        # Pillow reports corrupt chunk streams through these while decoding.
        SyntaxError,
        EOFError,
        struct.error,
        zlib.error,
        Image.DecompressionBombError,
    ) as exc:
        raise NotFoundError(f"Cannot open image {path}: {exc}", path=path) from exc


def save_png(image: Image.Image, path: Path) -> None:
    """Write *image* as PNG, removing any partial file when the write fails."""

    try:
        image.save(path, format="PNG")
    except (OSError, ValueError) as exc:
        try:
            if path.is_file():
                path.unlink()
        except OSError as cleanup_error:
            logger.error("Error cleaning up %s: %s", path, cleanup_error)
        raise CouldntSaveFileError(f"Cannot write {path}: {exc}", path=path) from exc
