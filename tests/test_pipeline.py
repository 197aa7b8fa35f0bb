"""End-to-end tests for warp_image and warp_file."""

import logging

import numpy as np
import pytest
from PIL import Image as PILImage

from matwarp.config.presets import ROTATE_90
from matwarp.config.values import WarpValues
from matwarp.errors import ImageIOError, ParameterError, SingularMatrixError
from matwarp.pipeline import warp_file, warp_image


def create_test_image(height: int = 4, width: int = 5, seed: int = 7) -> np.ndarray:
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(height, width, 3), dtype=np.uint8)


@pytest.fixture
def input_png(tmp_path):
    """Write a small RGB PNG and return (path, pixels)."""
    pixels = create_test_image()
    path = tmp_path / "in.png"
    PILImage.fromarray(pixels).save(path)
    return path, pixels


class TestWarpImage:
    """Test the in-memory entry point."""

    def test_identity(self):
        pixels = create_test_image()
        result = warp_image(pixels, WarpValues(background=(0, 0, 0, 255)))

        np.testing.assert_array_equal(result.pixels[..., :3], pixels)
        assert np.all(result.pixels[..., 3] == 255)
        assert not result.cut_off

    def test_values_forwarded(self):
        """Offset, dims and opaque reach the rasterizer."""
        pixels = create_test_image(2, 2)
        values = WarpValues(offset=(1, 0), dims=(3, 0), opaque=True)
        result = warp_image(pixels, values, backend="numpy")

        assert result.pixels.shape == (2, 3, 4)
        np.testing.assert_array_equal(result.pixels[:, 1:, :3], pixels)
        assert np.all(result.pixels[:, 1:, 3] == 255)
        assert np.all(result.pixels[:, 0] == 0)

    def test_matrix_logged_only_when_built(self, caplog):
        """A pre-built matrix skips the matrix diagnostics."""
        pixels = create_test_image()
        with caplog.at_level(logging.INFO, logger="matwarp"):
            warp_image(pixels, WarpValues())
            built = [r.getMessage() for r in caplog.records]
            caplog.clear()
            warp_image(pixels, WarpValues(), matrix=np.eye(2))
            passed = [r.getMessage() for r in caplog.records]

        assert any(m.startswith("Determinant:") for m in built)
        assert not any(m.startswith("Determinant:") for m in passed)

    def test_singular_inverse(self):
        with pytest.raises(SingularMatrixError):
            warp_image(create_test_image(), WarpValues(matrix=(1, 2, 2, 4), inverse=True))


class TestWarpFile:
    """Test the file-to-file pipeline."""

    def test_identity(self, tmp_path, input_png):
        path, pixels = input_png
        output = tmp_path / "out.png"

        result = warp_file(path, output, WarpValues(), show_progress=False)

        assert output.exists()
        with PILImage.open(output) as img:
            assert img.mode == "RGBA"
            saved = np.asarray(img)
        np.testing.assert_array_equal(saved[..., :3], pixels)
        assert result.bbox.width == 5
        assert result.bbox.height == 4

    def test_rotation_offset(self, tmp_path, input_png):
        """A quarter turn with offset lands inside a square canvas."""
        path, pixels = input_png
        output = tmp_path / "out.png"
        values = ROTATE_90.with_overrides(offset=(3, 0), dims=(5, 5))

        result = warp_file(path, output, values, show_progress=False)

        assert not result.cut_off
        assert result.bbox.min_x == 0
        assert result.bbox.max_x == 3
        assert result.bbox.max_y == 4

    def test_singular_inverse_writes_nothing(self, tmp_path, input_png):
        path, _ = input_png
        output = tmp_path / "out.png"
        values = WarpValues(matrix=(1, 2, 2, 4), inverse=True)

        with pytest.raises(SingularMatrixError, match="Cannot invert singular matrix"):
            warp_file(path, output, values, show_progress=False)
        assert not output.exists()

    def test_singular_checked_before_load(self, tmp_path):
        """Matrix errors win over a missing input file."""
        values = WarpValues(matrix=(0, 0, 0, 0), inverse=True)
        with pytest.raises(SingularMatrixError):
            warp_file(tmp_path / "missing.png", tmp_path / "out.png", values, show_progress=False)

    def test_missing_input(self, tmp_path):
        output = tmp_path / "out.png"
        with pytest.raises(ImageIOError):
            warp_file(tmp_path / "missing.png", output, WarpValues(), show_progress=False)
        assert not output.exists()

    def test_coordinate_overflow_writes_nothing(self, tmp_path, input_png):
        """Overflowing coordinates fail the run before anything is saved."""
        path, _ = input_png
        output = tmp_path / "out.png"
        with pytest.raises(ParameterError, match="int64"):
            warp_file(path, output, WarpValues.from_scale(1e20), show_progress=False)
        assert not output.exists()

    def test_cut_off_warning(self, tmp_path, input_png, caplog):
        """Cut-off pixels are reported but the image is still written."""
        path, _ = input_png
        output = tmp_path / "out.png"

        with caplog.at_level(logging.INFO, logger="matwarp"):
            result = warp_file(path, output, WarpValues.from_scale(2.0), show_progress=False)

        assert result.cut_off
        assert output.exists()
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "Some pixels were cut off" in warnings[0].getMessage()

    def test_diagnostics_logged(self, tmp_path, input_png, caplog):
        path, _ = input_png
        with caplog.at_level(logging.INFO, logger="matwarp"):
            warp_file(path, tmp_path / "out.png", WarpValues(), show_progress=False)

        messages = "\n".join(r.getMessage() for r in caplog.records)
        assert "Input image dimensions: 5x4" in messages
        assert "Output image dimensions: 5x4" in messages
        assert "Determinant: 1.0" in messages
        assert "Actual bounding box: (0, 0) - (4, 3)" in messages
        assert "cut off" not in messages
