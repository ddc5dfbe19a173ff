"""Draw the year labels onto a written composite."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Union

from PIL import ImageDraw, ImageFont

from .errors import FontLoadError
from .image_io import open_rgba, save_png
from .models import ColorPair, TextLabel

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@lru_cache(maxsize=None)
def load_font(size: int) -> Font:
    """Return the bundled label font at *size*; loaded once per size per process."""

    try:
        font = ImageFont.load_default(size=size)
    except (OSError, ImportError) as exc:
        raise FontLoadError(f"Cannot load bundled font at size {size}: {exc}") from exc

    if not isinstance(font, ImageFont.FreeTypeFont):
        # Without FreeType Pillow falls back to a fixed-size bitmap font.
        raise FontLoadError(
            f"Bundled font cannot be scaled to size {size}; Pillow lacks FreeType support"
        )
    return font


def apply_overlay(
    path: Path,
    colors: ColorPair,
    primary: TextLabel,
    secondary: TextLabel,
    font: Font,
) -> None:
    """Re-open *path*, draw both labels and overwrite the file in place.

    Drawing is not idempotent: running this twice on the same file blends the
    anti-aliased glyph edges a second time.
    """

    canvas = open_rgba(path)
    draw = ImageDraw.Draw(canvas)
    draw.text(primary.position, primary.text, fill=colors.primary, font=font)
    draw.text(secondary.position, secondary.text, fill=colors.secondary, font=font)
    save_png(canvas, path)
    logger.debug("Overlaid %r/%r on %s", primary.text, secondary.text, path)
