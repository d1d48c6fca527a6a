"""Unit tests for viewport state."""

import math

from cosmozoom.viewport_state import (
    DEFAULT_PIXEL_SCALE,
    MAX_ZOOM_PERCENT,
    MIN_ZOOM_PERCENT,
    NO_IMAGE,
    ViewportState,
    clamp_zoom,
)


class TestViewportState:
    def test_initial_state_is_no_image(self):
        vp = ViewportState()
        assert vp.native_size == NO_IMAGE
        assert not vp.has_image
        assert vp.zoom_percent == 100.0
        assert vp.pan_offset == (0.0, 0.0)
        assert vp.pixel_scale == DEFAULT_PIXEL_SCALE

    def test_set_image_resets_zoom_and_pan(self):
        vp = ViewportState()
        vp.set_zoom(400)
        vp.set_pan((12.0, -3.5))
        vp.set_image((3200, 3200), 0.05)
        assert vp.native_size == (3200, 3200)
        assert vp.pixel_scale == 0.05
        assert vp.zoom_percent == 100.0
        assert vp.pan_offset == (0.0, 0.0)

    def test_set_image_invalid_pixel_scale_uses_default(self):
        vp = ViewportState(default_pixel_scale=0.1)
        vp.set_image((10, 10), 0.0)
        assert vp.pixel_scale == 0.1
        vp.set_image((10, 10), None)
        assert vp.pixel_scale == 0.1
        vp.set_image((10, 10), float("nan"))
        assert vp.pixel_scale == 0.1

    def test_negative_dimensions_clamped_to_sentinel(self):
        vp = ViewportState()
        vp.set_image((-5, 20))
        assert vp.native_size == (0, 20)
        assert not vp.has_image

    def test_set_zoom_clamps(self):
        vp = ViewportState()
        assert vp.set_zoom(1.0) == MIN_ZOOM_PERCENT
        assert vp.set_zoom(1e9) == MAX_ZOOM_PERCENT
        assert vp.set_zoom(250.0) == 250.0

    def test_set_zoom_ignores_non_finite(self):
        vp = ViewportState()
        vp.set_zoom(300)
        vp.set_zoom(float("nan"))
        vp.set_zoom(float("inf"))
        assert vp.zoom_percent == 300

    def test_snapshot_is_detached(self):
        vp = ViewportState()
        vp.set_image((100, 50), 0.2)
        snap = vp.snapshot()
        vp.set_zoom(200)
        assert snap.zoom_percent == 100.0
        assert snap.zoom_factor == 1.0
        assert snap.has_image
        assert snap.native_size == (100, 50)

    def test_clear_image(self):
        vp = ViewportState()
        vp.set_image((100, 100))
        vp.clear_image()
        assert vp.native_size == NO_IMAGE


def test_clamp_zoom_bounds():
    assert clamp_zoom(-10) == MIN_ZOOM_PERCENT
    assert clamp_zoom(5000.0001) == MAX_ZOOM_PERCENT
    assert math.isclose(clamp_zoom(99.5), 99.5)
