"""Configuration helpers for the calendar composer module."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple

from .models import TextLabel


_CONFIG_ENV_PREFIX = "CALENDARWORKS_CALENDAR_COMPOSER__"

# Quantizers in Pillow cap indexed palettes at 256 entries.
MAX_PALETTE_SIZE = 256


def _coerce_int(value: object, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def _coerce_text(value: object, default: str) -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _coerce_position(value: object, default: Tuple[int, int]) -> Tuple[int, int]:
    if value is None:
        return default
    if isinstance(value, str):
        parts = [part.strip() for part in value.split(",")]
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        return default
    if len(parts) != 2:
        return default
    try:
        return int(parts[0]), int(parts[1])
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class ComposerSettings:
    """Default configuration values, optionally overridden from the environment."""

    default_palette_size: int = 256
    default_kmeans_iterations: int = 3
    default_primary_index: int = 0
    default_secondary_index: int = 200
    default_primary_text: str = "20"
    default_secondary_text: str = "19"
    default_primary_position: Tuple[int, int] = (380, 3035)
    default_secondary_position: Tuple[int, int] = (660, 3035)
    default_font_size: int = 250
    default_outer_workers: int = 4
    default_inner_workers: int = 4


@dataclass(frozen=True)
class ComposerConfig:
    """Fully resolved runtime configuration for a composer invocation."""

    months_dir: Path
    images_dir: Path
    export_dir: Path
    palette_size: int
    kmeans_iterations: int
    primary_index: int
    secondary_index: int
    primary_label: TextLabel
    secondary_label: TextLabel
    font_size: int
    outer_workers: int
    inner_workers: int
    dry_run: bool
    report_path: Optional[Path]


def _load_env_settings() -> Dict[str, object]:
    values: Dict[str, object] = {}
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(_CONFIG_ENV_PREFIX):
            continue
        key = env_key[len(_CONFIG_ENV_PREFIX) :].lower()
        values[key] = env_value
    return values


def load_settings() -> ComposerSettings:
    """Load built-in defaults, applying environment overrides when present."""

    raw = _load_env_settings()
    defaults = ComposerSettings()

    return ComposerSettings(
        default_palette_size=_coerce_int(
            raw.get("palette_size"), defaults.default_palette_size
        ),
        default_kmeans_iterations=_coerce_int(
            raw.get("kmeans_iterations"), defaults.default_kmeans_iterations
        ),
        default_primary_index=_coerce_int(
            raw.get("primary_index"), defaults.default_primary_index
        ),
        default_secondary_index=_coerce_int(
            raw.get("secondary_index"), defaults.default_secondary_index
        ),
        default_primary_text=_coerce_text(
            raw.get("primary_text"), defaults.default_primary_text
        ),
        default_secondary_text=_coerce_text(
            raw.get("secondary_text"), defaults.default_secondary_text
        ),
        default_primary_position=_coerce_position(
            raw.get("primary_position"), defaults.default_primary_position
        ),
        default_secondary_position=_coerce_position(
            raw.get("secondary_position"), defaults.default_secondary_position
        ),
        default_font_size=_coerce_int(
            raw.get("font_size"), defaults.default_font_size
        ),
        default_outer_workers=_coerce_int(
            raw.get("outer_workers"), defaults.default_outer_workers
        ),
        default_inner_workers=_coerce_int(
            raw.get("inner_workers"), defaults.default_inner_workers
        ),
    )


def build_runtime_config(
    *,
    settings: ComposerSettings,
    months_dir: Path,
    images_dir: Path,
    export_dir: Path,
    palette_size: Optional[int] = None,
    kmeans_iterations: Optional[int] = None,
    primary_index: Optional[int] = None,
    secondary_index: Optional[int] = None,
    primary_text: Optional[str] = None,
    secondary_text: Optional[str] = None,
    primary_position: Optional[Tuple[int, int]] = None,
    secondary_position: Optional[Tuple[int, int]] = None,
    font_size: Optional[int] = None,
    outer_workers: Optional[int] = None,
    inner_workers: Optional[int] = None,
    dry_run: bool = False,
    report_path: Optional[Path] = None,
) -> ComposerConfig:
    """Merge CLI overrides with defaults to produce a validated runtime config."""

    resolved_palette = int(
        settings.default_palette_size if palette_size is None else palette_size
    )
    if not 1 <= resolved_palette <= MAX_PALETTE_SIZE:
        raise ValueError(
            f"Palette size must be in the range [1, {MAX_PALETTE_SIZE}], got {resolved_palette}"
        )

    resolved_kmeans = int(
        settings.default_kmeans_iterations
        if kmeans_iterations is None
        else kmeans_iterations
    )
    if resolved_kmeans < 0:
        raise ValueError("K-means iterations must be zero or greater")

    resolved_primary = int(
        settings.default_primary_index if primary_index is None else primary_index
    )
    resolved_secondary = int(
        settings.default_secondary_index if secondary_index is None else secondary_index
    )
    for name, index in (("Primary", resolved_primary), ("Secondary", resolved_secondary)):
        if not 0 <= index < resolved_palette:
            raise ValueError(
                f"{name} palette index {index} must be in the range [0, {resolved_palette - 1}]"
            )

    resolved_primary_text = (primary_text or settings.default_primary_text).strip()
    resolved_secondary_text = (
        secondary_text or settings.default_secondary_text
    ).strip()
    if not resolved_primary_text or not resolved_secondary_text:
        raise ValueError("Label texts must not be empty")

    resolved_primary_pos = tuple(primary_position or settings.default_primary_position)
    resolved_secondary_pos = tuple(
        secondary_position or settings.default_secondary_position
    )
    for position in (resolved_primary_pos, resolved_secondary_pos):
        if len(position) != 2 or min(position) < 0:
            raise ValueError(f"Label position {position} must be two non-negative ints")

    resolved_font_size = int(
        settings.default_font_size if font_size is None else font_size
    )
    if resolved_font_size <= 0:
        raise ValueError("Font size must be positive")

    resolved_outer = int(
        settings.default_outer_workers if outer_workers is None else outer_workers
    )
    resolved_inner = int(
        settings.default_inner_workers if inner_workers is None else inner_workers
    )
    if resolved_outer < 1 or resolved_inner < 1:
        raise ValueError("Worker counts must be at least 1")

    return ComposerConfig(
        months_dir=Path(months_dir).expanduser(),
        images_dir=Path(images_dir).expanduser(),
        export_dir=Path(export_dir).expanduser(),
        palette_size=resolved_palette,
        kmeans_iterations=resolved_kmeans,
        primary_index=resolved_primary,
        secondary_index=resolved_secondary,
        primary_label=TextLabel(
            text=resolved_primary_text,
            position=(int(resolved_primary_pos[0]), int(resolved_primary_pos[1])),
        ),
        secondary_label=TextLabel(
            text=resolved_secondary_text,
            position=(int(resolved_secondary_pos[0]), int(resolved_secondary_pos[1])),
        ),
        font_size=resolved_font_size,
        outer_workers=resolved_outer,
        inner_workers=resolved_inner,
        dry_run=dry_run,
        report_path=Path(report_path).expanduser() if report_path else None,
    )


def load_config(
    *,
    months_dir: Path,
    images_dir: Path,
    export_dir: Path,
    **overrides: object,
) -> ComposerConfig:
    """Convenience helper used by the CLI to resolve the runtime config."""

    settings = load_settings()
    return build_runtime_config(
        settings=settings,
        months_dir=months_dir,
        images_dir=images_dir,
        export_dir=export_dir,
        **overrides,
    )
