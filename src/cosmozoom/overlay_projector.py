"""Pure projection of detections and pointer state into overlay geometry.

Nothing here touches a rendering surface; the returned dataclasses are
bound to one by an adapter (see :mod:`cosmozoom.render_mpl`).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from cosmozoom.coordinate_transforms import (
    container_to_image_pixel,
    effective_pixel_scale,
    image_pixel_to_approx_celestial,
    is_inside_image,
    round_half_up,
    visible_native_extent,
)
from cosmozoom.detection_sampler import Detection
from cosmozoom.viewport_state import ViewportSnapshot

__all__ = [
    "PIXEL_GRID_THRESHOLD",
    "OverlayBox",
    "PointerSample",
    "PixelInfo",
    "OverlayFrame",
    "detection_label",
    "project_pointer",
    "project",
    "detection_details",
]

PIXEL_GRID_THRESHOLD = 1000.0


@dataclass(frozen=True)
class OverlayBox:
    """Detection rectangle in percent of the image, clipped to [0, 100]."""

    id: str
    label: str
    left: float
    top: float
    width: float
    height: float
    color: str
    category: str
    index: int


@dataclass(frozen=True)
class PointerSample:
    """Pointer position with the bounding boxes needed to map it.

    Parameters
    ----------
    x, y : float
        Pointer position relative to the container.
    container_rect, image_rect : tuple[float, float, float, float]
        (left, top, width, height) of the container and the rendered image.
    """

    x: float
    y: float
    container_rect: Tuple[float, float, float, float]
    image_rect: Tuple[float, float, float, float]


@dataclass(frozen=True)
class PixelInfo:
    """Info-panel payload for the pixel under the pointer."""

    native_pixel: Tuple[int, int]
    zoom_percent: int
    effective_scale: str
    visible_extent: Tuple[int, int]
    ra: str
    dec: str
    inside_image: bool

    def as_text(self) -> str:
        px, py = self.native_pixel
        vw, vh = self.visible_extent
        return "\n".join(
            [
                f"Pixel: {px}, {py}",
                f"Zoom: {self.zoom_percent}%",
                f"Scale: {self.effective_scale}",
                f"Visible: {vw}×{vh}",
                f"RA: {self.ra}",
                f"Dec: {self.dec}",
            ]
        )


@dataclass(frozen=True)
class OverlayFrame:
    """Everything the rendering surface needs for one overlay redraw."""

    boxes: Tuple[OverlayBox, ...]
    info: Optional[PixelInfo]
    pixel_grid: bool


def detection_label(detection: Detection) -> str:
    return f"{detection.type} ({round_half_up(detection.confidence * 100)}%)"


def _clip_box(left: float, top: float, width: float, height: float) -> Tuple[float, float, float, float]:
    left = max(0.0, min(100.0, left))
    top = max(0.0, min(100.0, top))
    width = max(0.0, min(width, 100.0 - left))
    height = max(0.0, min(height, 100.0 - top))
    return left, top, width, height


def project_pointer(pointer: PointerSample, snapshot: ViewportSnapshot) -> PixelInfo:
    """Map a pointer sample to the pixel info payload."""
    px, py = container_to_image_pixel(
        pointer.x,
        pointer.y,
        pointer.container_rect,
        pointer.image_rect,
        snapshot.zoom_percent,
        snapshot.native_size,
    )
    celestial = image_pixel_to_approx_celestial(px, py, snapshot.native_size)
    return PixelInfo(
        native_pixel=(round_half_up(px), round_half_up(py)),
        zoom_percent=round_half_up(snapshot.zoom_percent),
        effective_scale=effective_pixel_scale(snapshot.pixel_scale, snapshot.zoom_percent),
        visible_extent=visible_native_extent(snapshot.native_size, snapshot.zoom_percent),
        ra=celestial.ra,
        dec=celestial.dec,
        inside_image=is_inside_image(px, py, snapshot.native_size),
    )


def project(
    detections: Sequence[Detection],
    snapshot: ViewportSnapshot,
    pointer: Optional[PointerSample] = None,
    pixel_grid_threshold: float = PIXEL_GRID_THRESHOLD,
) -> OverlayFrame:
    """Build overlay geometry for the current detections and pointer.

    Detection positions are already percent-of-image, so they pass through
    unchanged apart from clipping to the image bounds. No state is kept
    between calls.
    """
    boxes = []
    for index, detection in enumerate(detections):
        left, top, width, height = _clip_box(
            detection.position[0], detection.position[1], detection.size[0], detection.size[1]
        )
        boxes.append(
            OverlayBox(
                id=detection.id,
                label=detection_label(detection),
                left=left,
                top=top,
                width=width,
                height=height,
                color=detection.color,
                category=str(detection.category.value),
                index=index,
            )
        )
    info = project_pointer(pointer, snapshot) if pointer is not None and snapshot.has_image else None
    return OverlayFrame(
        boxes=tuple(boxes),
        info=info,
        pixel_grid=snapshot.zoom_percent > pixel_grid_threshold,
    )


def detection_details(detection: Detection) -> str:
    """Multi-line description shown when a detection box is selected."""
    meta = detection.metadata
    return "\n".join(
        [
            f"Type: {detection.type}",
            f"Description: {detection.description}",
            f"Confidence: {round_half_up(detection.confidence * 100)}%",
            "",
            f"Position: ({round_half_up(detection.position[0])}%, {round_half_up(detection.position[1])}%)",
            f"Size: {round_half_up(detection.size[0])}% × {round_half_up(detection.size[1])}%",
            "",
            f"Brightness: {meta.brightness} counts/sec",
            f"Temperature: {meta.temperature}",
            f"Redshift: z = {meta.redshift}",
            f"Angular Size: {meta.angular_size}",
            f"Distance: {meta.distance}",
            f"Mass: {meta.mass}",
            f"Spectral Type: {meta.spectral_type}",
            "",
            f"Detected: {detection.timestamp}",
        ]
    )
