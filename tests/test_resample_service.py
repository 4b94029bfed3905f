"""Tests for the grid resampler: crop geometry, box filtering and colour adjustment."""
from __future__ import annotations

import numpy as np
import pytest

from conftest import encode_png, gradient_image, solid_image, stripes_image
from pixelcraft import config
from pixelcraft.models.image_model import Transform
from pixelcraft.services.errors import DecodeError, EmptyInputError, SurfaceError
from pixelcraft.services.resample_service import _box_sample, _to_image, crop_region


@pytest.mark.parametrize("grid_size", range(8, 65, 2))
def test_buffer_matches_grid_size(resample_service, gradient_source, grid_size):
    buffer = resample_service.resample(gradient_source, Transform.identity(), grid_size)

    assert buffer.grid_size == grid_size
    assert buffer.image.size == (grid_size, grid_size)
    assert buffer.image.mode == "RGBA"


def test_grid_size_out_of_range_is_clamped(resample_service, gradient_source):
    assert resample_service.resample(gradient_source, Transform.identity(), 2).grid_size == 8
    assert resample_service.resample(gradient_source, Transform.identity(), 500).grid_size == 64


def test_identity_crop_covers_shorter_side_centered():
    crop = crop_region(120, 80, Transform.identity())

    assert crop.size == 80
    assert crop.x == pytest.approx((120 - 80) / 2)
    assert crop.y == pytest.approx(0)


def test_crop_shrinks_as_scale_grows():
    scales = [0.1, 0.5, 1.0, 1.5, 4.0, 20.0]
    sizes = [crop_region(300, 200, Transform(0, 0, s)).size for s in scales]

    assert all(a > b for a, b in zip(sizes, sizes[1:]))


def test_offset_moves_crop_window_opposite_to_drag():
    crop = crop_region(120, 80, Transform(10, -5, 1))

    assert crop.x == pytest.approx(20 - 10)
    assert crop.y == pytest.approx(0 + 5)


def test_resample_is_idempotent(resample_service, gradient_source):
    transform = Transform(7.5, -3.25, 1.7)

    first = resample_service.resample(gradient_source, transform, 24, contrast=15, saturation=-20)
    second = resample_service.resample(gradient_source, transform, 24, contrast=15, saturation=-20)

    assert first.tobytes() == second.tobytes()


def test_neutral_adjustment_equals_unadjusted_pipeline(resample_service, gradient_source):
    transform = Transform(4, 2, 1.3)
    buffer = resample_service.resample(gradient_source, transform, 16, contrast=0, saturation=0)

    crop = crop_region(gradient_source.width, gradient_source.height, transform)
    plain = _to_image(_box_sample(gradient_source.pil_image, crop, 16))

    assert buffer.tobytes() == plain.tobytes()


def test_box_filter_blends_instead_of_picking(resample_service):
    source = stripes_image(64, on=(255, 255, 255, 255), off=(0, 0, 0, 255))

    pixels = resample_service.resample(source, Transform.identity(), 8).pixels

    assert set(np.unique(pixels[..., :3])) <= {127, 128}
    assert (pixels[..., 3] == 255).all()


def test_solid_image_stays_solid(resample_service):
    source = solid_image((100, 60), (200, 40, 10, 255))

    pixels = resample_service.resample(source, Transform(3, 1, 2.5), 12).pixels

    assert (pixels == np.array([200, 40, 10, 255], dtype=np.uint8)).all()


def test_transparent_pixels_do_not_bleed_colour(resample_service):
    source = stripes_image(64, on=(255, 0, 0, 255), off=(0, 255, 0, 0))

    pixels = resample_service.resample(source, Transform.identity(), 8).pixels

    assert (pixels[..., :3] == np.array([255, 0, 0])).all()
    assert set(np.unique(pixels[..., 3])) <= {127, 128}


def test_area_outside_source_is_transparent(resample_service):
    source = solid_image((64, 64), (255, 255, 255, 255))

    # scale 0.5: the crop is 128 px wide starting at -32, cells are 16 px
    pixels = resample_service.resample(source, Transform(0, 0, 0.5), 8).pixels

    assert tuple(pixels[0, 0]) == (0, 0, 0, 0)
    assert tuple(pixels[7, 7]) == (0, 0, 0, 0)
    assert tuple(pixels[4, 4]) == (255, 255, 255, 255)


def test_partially_covered_cell_gets_partial_alpha(resample_service):
    source = solid_image((64, 64), (255, 255, 255, 255))

    # crop starts at x=-40: cell 2 spans [-8, 8], half of it inside the image
    pixels = resample_service.resample(source, Transform(8, 0, 0.5), 8).pixels

    assert tuple(pixels[4, 2][:3]) == (255, 255, 255)
    assert pixels[4, 2][3] in (127, 128)


def test_far_zoom_out_reduces_before_padding(resample_service, monkeypatch):
    monkeypatch.setattr(config, "MAX_SAMPLE_SIDE", 64)
    source = solid_image((64, 64), (255, 255, 255, 255))

    # the 128 px crop does not fit a 64 px canvas, so the source is halved first
    pixels = resample_service.resample(source, Transform(0, 0, 0.5), 8).pixels

    assert tuple(pixels[0, 0]) == (0, 0, 0, 0)
    assert tuple(pixels[7, 7]) == (0, 0, 0, 0)
    assert tuple(pixels[4, 4]) == (255, 255, 255, 255)


def test_crop_fully_outside_source_is_transparent(resample_service):
    source = solid_image((32, 32), (255, 0, 0, 255))

    pixels = resample_service.resample(source, Transform(500, 0, 1), 8).pixels

    assert (pixels == 0).all()


@pytest.mark.parametrize("contrast, expected", [(50, 32), (-50, 96)])
def test_contrast_scales_distance_from_mid_grey(resample_service, contrast, expected):
    source = solid_image((32, 32), (64, 64, 64, 255))

    pixels = resample_service.resample(source, Transform.identity(), 8, contrast=contrast, saturation=0).pixels

    assert (pixels[..., :3] == expected).all()


def test_desaturation_pulls_towards_luma(resample_service):
    source = solid_image((32, 32), (255, 0, 0, 255))

    pixels = resample_service.resample(source, Transform.identity(), 8, contrast=0, saturation=-50).pixels

    assert tuple(pixels[0, 0]) == (155, 27, 27, 255)


def test_saturation_keeps_grey_grey(resample_service):
    source = solid_image((32, 32), (100, 100, 100, 255))

    pixels = resample_service.resample(source, Transform.identity(), 8, contrast=0, saturation=50).pixels

    assert (pixels[..., :3] == 100).all()


def test_adjustments_out_of_range_are_clamped(resample_service, gradient_source):
    clamped = resample_service.resample(gradient_source, Transform.identity(), 16, contrast=50, saturation=-50)
    extreme = resample_service.resample(gradient_source, Transform.identity(), 16, contrast=400, saturation=-400)

    assert clamped.tobytes() == extreme.tobytes()


def test_scale_out_of_range_is_clamped(resample_service, gradient_source):
    clamped = resample_service.resample(gradient_source, Transform(0, 0, 20.0), 16)
    extreme = resample_service.resample(gradient_source, Transform(0, 0, 1000.0), 16)

    assert extreme.crop == clamped.crop


def test_encoded_bytes_are_decoded(resample_service, image_service):
    image = gradient_image(48, 40)

    from_bytes = resample_service.resample(encode_png(image), Transform.identity(), 16)
    from_raster = resample_service.resample(image_service.from_pil(image), Transform.identity(), 16)

    assert from_bytes.tobytes() == from_raster.tobytes()


def test_missing_source_raises_empty_input(resample_service):
    with pytest.raises(EmptyInputError):
        resample_service.resample(None, Transform.identity(), 16)


def test_garbage_bytes_raise_decode_error(resample_service):
    with pytest.raises(DecodeError):
        resample_service.resample(b"definitely not an image", Transform.identity(), 16)


def test_non_finite_offset_raises_surface_error(resample_service, gradient_source):
    with pytest.raises(SurfaceError):
        resample_service.resample(gradient_source, Transform(float("nan"), 0, 1), 16)


def test_sample_rejects_degenerate_size(resample_service, gradient_source):
    with pytest.raises(SurfaceError):
        resample_service.sample(gradient_source, Transform.identity(), 0)


@pytest.mark.parametrize("scale", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_scale_raises_surface_error(resample_service, gradient_source, scale):
    with pytest.raises(SurfaceError):
        resample_service.resample(gradient_source, Transform(0, 0, scale), 16)
    with pytest.raises(SurfaceError):
        resample_service.sample(gradient_source, Transform(0, 0, scale), 64)
    with pytest.raises(SurfaceError):
        crop_region(gradient_source.width, gradient_source.height, Transform(0, 0, scale))
