from pathlib import Path

import numpy as np
import pytest
from PIL import Image, ImageFont

from calendarworks.apps.calendar_composer.core.config import ComposerSettings
from calendarworks.apps.calendar_composer.core.errors import NotFoundError
from calendarworks.apps.calendar_composer.core.models import ColorPair, TextLabel
from calendarworks.apps.calendar_composer.core.overlay import apply_overlay, load_font

COLORS = ColorPair(primary=(10, 20, 30, 255), secondary=(200, 40, 90, 255))
PRIMARY = TextLabel(text="20", position=(10, 10))
SECONDARY = TextLabel(text="19", position=(130, 10))


def _canvas(path: Path, size=(240, 120)) -> None:
    Image.new("RGBA", size, (255, 255, 255, 255)).save(path)


def _pixels(path: Path) -> np.ndarray:
    with Image.open(path) as image:
        return np.asarray(image.convert("RGBA")).copy()


def test_load_font_is_loaded_once_per_size() -> None:
    font = load_font(48)

    assert isinstance(font, ImageFont.FreeTypeFont)
    assert load_font(48) is font
    assert font.size == 48


def test_overlay_draws_each_label_in_its_colour(tmp_path: Path) -> None:
    target = tmp_path / "composite.png"
    _canvas(target)

    apply_overlay(target, COLORS, PRIMARY, SECONDARY, load_font(60))

    pixels = _pixels(target)
    left, right = pixels[:, :120], pixels[:, 120:]
    assert (left == COLORS.primary).all(axis=-1).any()
    assert (right == COLORS.secondary).all(axis=-1).any()
    assert not (left == COLORS.secondary).all(axis=-1).any()


def test_reapplying_overlay_changes_pixels(tmp_path: Path) -> None:
    """Overlay is destructive: a second pass re-blends the anti-aliased edges."""

    target = tmp_path / "composite.png"
    _canvas(target)
    font = load_font(60)

    apply_overlay(target, COLORS, PRIMARY, SECONDARY, font)
    once = _pixels(target)
    apply_overlay(target, COLORS, PRIMARY, SECONDARY, font)
    twice = _pixels(target)

    assert not np.array_equal(once, twice)


def test_labels_outside_canvas_leave_pixels_untouched(tmp_path: Path) -> None:
    target = tmp_path / "tiny.png"
    _canvas(target, size=(2, 4))
    before = _pixels(target)
    defaults = ComposerSettings()

    apply_overlay(
        target,
        COLORS,
        TextLabel(defaults.default_primary_text, defaults.default_primary_position),
        TextLabel(defaults.default_secondary_text, defaults.default_secondary_position),
        load_font(defaults.default_font_size),
    )

    np.testing.assert_array_equal(_pixels(target), before)


def test_missing_composite_is_not_found(tmp_path: Path) -> None:
    with pytest.raises(NotFoundError):
        apply_overlay(tmp_path / "absent.png", COLORS, PRIMARY, SECONDARY, load_font(20))
