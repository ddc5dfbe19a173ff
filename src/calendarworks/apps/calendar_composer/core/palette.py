"""Palette extraction via k-means refined colour quantization.

The source image is reduced to an indexed palette with Pillow's median-cut
quantizer (refined with k-means iterations), then remapped onto that palette
with Floyd-Steinberg dithering. Label colours are read from fixed palette
indices, so low-colour images that produce a short palette fail loudly rather
than silently reusing another entry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image

from .errors import PaletteIndexOutOfRangeError
from .image_io import open_rgba
from .models import RGB, ColorPair

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuantizedPalette:
    """Palette entries in index order and the dithered indexed image."""

    colors: Tuple[RGB, ...]
    indexed: Image.Image

    def __len__(self) -> int:
        return len(self.colors)

    def entry(self, index: int, *, source: Optional[Path] = None) -> RGB:
        if not 0 <= index < len(self.colors):
            raise PaletteIndexOutOfRangeError(index, len(self.colors), path=source)
        return self.colors[index]


def quantize(image: Image.Image, *, colors: int = 256, kmeans: int = 3) -> QuantizedPalette:
    """Quantize *image* to at most *colors* palette entries."""

    # Median cut does not accept alpha; label colours are forced opaque anyway.
    rgb = image.convert("RGBA").convert("RGB")
    reduced = rgb.quantize(colors=colors, method=Image.Quantize.MEDIANCUT, kmeans=kmeans)
    indexed = rgb.quantize(palette=reduced, dither=Image.Dither.FLOYDSTEINBERG)

    # Pillow trims the palette to the entries the quantizer actually produced.
    flat = reduced.getpalette() or []
    entries = tuple(
        (flat[offset], flat[offset + 1], flat[offset + 2])
        for offset in range(0, len(flat) - 2, 3)
    )
    return QuantizedPalette(colors=entries, indexed=indexed)


def extract_color_pair(
    source: Path,
    *,
    palette_size: int = 256,
    kmeans_iterations: int = 3,
    primary_index: int = 0,
    secondary_index: int = 200,
) -> ColorPair:
    """Derive the label colours for every composite built from *source*.

    Raises:
        NotFoundError: *source* cannot be opened or decoded.
        PaletteIndexOutOfRangeError: the quantized palette is shorter than an index requires.
    """

    palette = quantize(open_rgba(source), colors=palette_size, kmeans=kmeans_iterations)
    logger.debug("Quantized %s to %d palette entries", source.name, len(palette))

    colors = ColorPair.from_rgb(
        palette.entry(primary_index, source=source),
        palette.entry(secondary_index, source=source),
    )
    logger.info(
        "Palette for %s: primary=%s secondary=%s",
        source.name,
        colors.primary,
        colors.secondary,
    )
    return colors
