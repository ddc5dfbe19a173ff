"""Filesystem helpers for listing source entries and planning output paths."""

from __future__ import annotations

import logging
from itertools import product
from pathlib import Path
from typing import Dict, List, Sequence, Tuple

from .errors import NotFoundError, OutputCollisionError
from .models import ImagePair

logger = logging.getLogger(__name__)


def list_entries(directory: Path) -> Tuple[Path, ...]:
    """Return every direct child of *directory*, sorted by name.

    No extension filtering happens here: subdirectories and non-image files
    are returned too and fail later when they are decoded.
    """

    try:
        entries = sorted(directory.iterdir(), key=lambda path: path.name)
    except OSError as exc:
        raise NotFoundError(
            f"Cannot list directory {directory}: {exc}", path=directory
        ) from exc

    logger.debug("Listed %d entries under %s", len(entries), directory)
    return tuple(entries)


def output_path_for(export_dir: Path, month: Path, image: Path) -> Path:
    return export_dir / f"{month.stem}-{image.stem}.png"


def plan_pairs(
    months: Sequence[Path],
    images: Sequence[Path],
    export_dir: Path,
) -> Dict[Path, List[ImagePair]]:
    """Build the month x image cross-product, grouped by image.

    Raises :class:`OutputCollisionError` when two pairs would write the same
    file (e.g. ``jan.png`` and ``jan.jpg`` sharing a stem).
    """

    grouped: Dict[Path, List[ImagePair]] = {image: [] for image in images}
    claimed: Dict[Path, ImagePair] = {}
    collisions: List[str] = []

    for image, month in product(images, months):
        pair = ImagePair(
            month=month, image=image, output=output_path_for(export_dir, month, image)
        )
        previous = claimed.get(pair.output)
        if previous is not None:
            collisions.append(
                f"{pair.output.name} ({previous.label} / {pair.label})"
            )
            continue
        claimed[pair.output] = pair
        grouped[image].append(pair)

    if collisions:
        raise OutputCollisionError(
            "Output names collide: " + "; ".join(collisions)
        )

    return grouped
