"""Vertical stacking of two equal-width images."""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np
from PIL import Image

from .errors import MismatchSizeError
from .image_io import open_rgba, save_png

logger = logging.getLogger(__name__)


def stack_vertically(top: Image.Image, bottom: Image.Image) -> Image.Image:
    """Return a new RGBA image with *top*'s rows followed by *bottom*'s rows.

    Both inputs must already be RGBA and share a width; callers validate the
    width so they can report which files disagree.
    """

    top_pixels = np.asarray(top, dtype=np.uint8)
    bottom_pixels = np.asarray(bottom, dtype=np.uint8)
    # (H, W, 4) uint8 arrays map back to RGBA.
    return Image.fromarray(np.vstack((top_pixels, bottom_pixels)))


def compose_pair(top_path: Path, bottom_path: Path, output_path: Path) -> Image.Image:
    """Stack *top_path* above *bottom_path* and write the PNG to *output_path*.

    Raises:
        NotFoundError: a source image is missing or cannot be decoded.
        MismatchSizeError: the widths differ; nothing is written.
        CouldntSaveFileError: the composite cannot be written.
    """

    top = open_rgba(top_path)
    bottom = open_rgba(bottom_path)

    if top.width != bottom.width:
        raise MismatchSizeError(top_path, top.width, bottom_path, bottom.width)

    composite = stack_vertically(top, bottom)
    save_png(composite, output_path)
    logger.debug(
        "Wrote %s (%dx%d)", output_path, composite.width, composite.height
    )
    return composite
