"""Tests for overlay projection."""

import pytest

from cosmozoom.detection_catalog import Category, Rarity
from cosmozoom.detection_sampler import Detection, DetectionMetadata
from cosmozoom.overlay_projector import (
    PointerSample,
    detection_details,
    detection_label,
    project,
    project_pointer,
)
from cosmozoom.viewport_state import ViewportState


def _detection(position=(20.0, 30.0), size=(10.0, 8.0), confidence=0.875, type_="Emission Nebula"):
    return Detection(
        id="detection_1_0",
        type=type_,
        description="Ionized gas cloud",
        category=Category.NEBULA,
        rarity=Rarity.COMMON,
        confidence=confidence,
        position=position,
        size=size,
        color="#ec4899",
        metadata=DetectionMetadata(
            brightness=1234,
            temperature="8000K",
            redshift="N/A",
            angular_size='42.00"',
            distance="1200 ly",
            mass="N/A",
            spectral_type="N/A",
        ),
        timestamp="2025-10-04T12:00:00+00:00",
    )


def _pointer(x, y):
    return PointerSample(x, y, (0.0, 0.0, 800.0, 800.0), (0.0, 0.0, 4096.0, 4096.0))


class TestProject:
    def test_boxes_pass_through_percentages(self, state):
        frame = project([_detection()], state.snapshot())
        (box,) = frame.boxes
        assert (box.left, box.top, box.width, box.height) == (20.0, 30.0, 10.0, 8.0)
        assert box.label == "Emission Nebula (88%)"
        assert box.color == "#ec4899"
        assert box.category == "nebula"
        assert box.index == 0

    def test_boxes_independent_of_zoom(self, state):
        detections = [_detection()]
        before = project(detections, state.snapshot()).boxes
        state.set_zoom(800.0)
        state.set_pan((120.0, -40.0))
        assert project(detections, state.snapshot()).boxes == before

    def test_boxes_clipped_to_image(self, state):
        frame = project([_detection(position=(90.0, 95.0), size=(20.0, 10.0))], state.snapshot())
        (box,) = frame.boxes
        assert box.left + box.width == pytest.approx(100.0)
        assert box.top + box.height == pytest.approx(100.0)

    def test_sampler_batch_fits_inside_image(self, state, sampler):
        frame = project(sampler.sample(count=17), state.snapshot())
        assert len(frame.boxes) == 17
        for box in frame.boxes:
            assert 0.0 <= box.left <= box.left + box.width <= 100.0
            assert 0.0 <= box.top <= box.top + box.height <= 100.0

    def test_no_pointer_means_no_info(self, state):
        assert project([], state.snapshot()).info is None

    def test_no_image_means_no_info(self):
        frame = project([], ViewportState().snapshot(), _pointer(10.0, 10.0))
        assert frame.info is None

    def test_pixel_grid_flag(self, state):
        assert not project([], state.snapshot()).pixel_grid
        state.set_zoom(1200.0)
        assert project([], state.snapshot()).pixel_grid
        assert not project([], state.snapshot(), pixel_grid_threshold=2000.0).pixel_grid


class TestPointer:
    def test_pixel_info(self, state):
        info = project_pointer(_pointer(2048.0, 1024.0), state.snapshot())
        assert info.native_pixel == (2048, 1024)
        assert info.zoom_percent == 100
        assert info.effective_scale == '0.0310"/px'
        assert info.visible_extent == (4096, 4096)
        assert info.ra == "12h 00m 00s"
        assert info.dec == "-45° 00' 00\""
        assert info.inside_image

    def test_pointer_outside_image(self, state):
        sample = PointerSample(5.0, 5.0, (0.0, 0.0, 800.0, 800.0), (100.0, 100.0, 400.0, 400.0))
        assert not project_pointer(sample, state.snapshot()).inside_image

    def test_as_text(self, state):
        text = project_pointer(_pointer(2048.0, 1024.0), state.snapshot()).as_text()
        assert "Pixel: 2048, 1024" in text
        assert "Zoom: 100%" in text
        assert "Visible: 4096×4096" in text


def test_detection_label_rounds_half_up():
    assert detection_label(_detection(confidence=0.625)) == "Emission Nebula (63%)"
    assert detection_label(_detection(confidence=0.9)) == "Emission Nebula (90%)"


def test_detection_details():
    text = detection_details(_detection())
    lines = text.splitlines()
    assert lines[0] == "Type: Emission Nebula"
    assert "Confidence: 88%" in lines
    assert "Position: (20%, 30%)" in lines
    assert "Size: 10% × 8%" in lines
    assert "Brightness: 1234 counts/sec" in lines
    assert "Redshift: z = N/A" in lines
    assert lines[-1] == "Detected: 2025-10-04T12:00:00+00:00"
