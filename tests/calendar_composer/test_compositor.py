from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from calendarworks.apps.calendar_composer.core.compositor import compose_pair, stack_vertically
from calendarworks.apps.calendar_composer.core.errors import (
    CouldntSaveFileError,
    MismatchSizeError,
    NotFoundError,
)


def _noise(path: Path, width: int, height: int, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    pixels = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    Image.fromarray(pixels).save(path)
    return pixels


def test_compose_pair_stacks_top_above_bottom(tmp_path: Path) -> None:
    top = _noise(tmp_path / "top.png", 5, 3, seed=1)
    bottom = _noise(tmp_path / "bottom.png", 5, 4, seed=2)
    output = tmp_path / "out.png"

    compose_pair(tmp_path / "top.png", tmp_path / "bottom.png", output)

    with Image.open(output) as written:
        assert written.mode == "RGBA"
        assert written.size == (5, 7)
        pixels = np.asarray(written)
    np.testing.assert_array_equal(pixels[:3], top)
    np.testing.assert_array_equal(pixels[3:], bottom)


def test_compose_pair_converts_rgb_sources_to_opaque_rgba(tmp_path: Path) -> None:
    Image.new("RGB", (4, 2), (10, 20, 30)).save(tmp_path / "a.jpg", quality=100)
    Image.new("RGB", (4, 3), (200, 100, 0)).save(tmp_path / "b.png")
    output = tmp_path / "out.png"

    composite = compose_pair(tmp_path / "a.jpg", tmp_path / "b.png", output)

    assert composite.size == (4, 5)
    alpha = np.asarray(composite)[:, :, 3]
    assert (alpha == 255).all()
    assert composite.getpixel((0, 4)) == (200, 100, 0, 255)


def test_stack_vertically_keeps_width() -> None:
    top = Image.new("RGBA", (3, 1), (1, 2, 3, 4))
    bottom = Image.new("RGBA", (3, 2), (5, 6, 7, 8))

    stacked = stack_vertically(top, bottom)

    assert stacked.size == (3, 3)
    assert stacked.getpixel((2, 0)) == (1, 2, 3, 4)
    assert stacked.getpixel((2, 2)) == (5, 6, 7, 8)


def test_width_mismatch_fails_without_writing(tmp_path: Path) -> None:
    _noise(tmp_path / "narrow.png", 2, 2, seed=3)
    _noise(tmp_path / "wide.png", 3, 2, seed=4)
    output = tmp_path / "out.png"

    with pytest.raises(MismatchSizeError) as excinfo:
        compose_pair(tmp_path / "narrow.png", tmp_path / "wide.png", output)

    assert excinfo.value.kind == "mismatch_size"
    assert (excinfo.value.top_width, excinfo.value.bottom_width) == (2, 3)
    assert not output.exists()


def test_missing_source_is_not_found(tmp_path: Path) -> None:
    _noise(tmp_path / "top.png", 2, 2, seed=5)

    with pytest.raises(NotFoundError):
        compose_pair(tmp_path / "top.png", tmp_path / "absent.png", tmp_path / "out.png")

    assert not (tmp_path / "out.png").exists()


def test_directory_and_garbage_sources_are_not_found(tmp_path: Path) -> None:
    _noise(tmp_path / "top.png", 2, 2, seed=6)
    (tmp_path / "folder").mkdir()
    (tmp_path / "notes.txt").write_text("not an image", encoding="utf-8")

    with pytest.raises(NotFoundError):
        compose_pair(tmp_path / "top.png", tmp_path / "folder", tmp_path / "out.png")
    with pytest.raises(NotFoundError):
        compose_pair(tmp_path / "notes.txt", tmp_path / "top.png", tmp_path / "out.png")


def test_unwritable_output_is_reported(tmp_path: Path) -> None:
    _noise(tmp_path / "top.png", 2, 2, seed=7)
    _noise(tmp_path / "bottom.png", 2, 2, seed=8)
    output = tmp_path / "missing_dir" / "out.png"

    with pytest.raises(CouldntSaveFileError) as excinfo:
        compose_pair(tmp_path / "top.png", tmp_path / "bottom.png", output)

    assert excinfo.value.path == output
    assert not output.exists()


def _corrupt_second_idat(path: Path) -> None:
    """Garble the type of the second IDAT chunk so decoding fails mid-stream."""

    data = bytearray(path.read_bytes())
    offset = 8
    idat_seen = 0
    while offset < len(data):
        length = int.from_bytes(data[offset : offset + 4], "big")
        if data[offset + 4 : offset + 8] == b"IDAT":
            idat_seen += 1
            if idat_seen == 2:
                data[offset + 4 : offset + 8] = b"\x8d\x96\xc6\x14"
                path.write_bytes(bytes(data))
                return
        offset += 12 + length
    raise AssertionError(f"{path} has fewer than two IDAT chunks")


def test_compose_pair_reports_corrupt_png_as_not_found(tmp_path: Path) -> None:
    _noise(tmp_path / "top.png", 256, 256, seed=1)
    _corrupt_second_idat(tmp_path / "top.png")
    _noise(tmp_path / "bottom.png", 256, 4, seed=2)
    output = tmp_path / "out.png"

    with pytest.raises(NotFoundError) as excinfo:
        compose_pair(tmp_path / "top.png", tmp_path / "bottom.png", output)

    assert excinfo.value.path == tmp_path / "top.png"
    assert not output.exists()
