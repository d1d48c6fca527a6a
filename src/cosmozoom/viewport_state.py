"""Zoom, pan and image-size state for one viewport session."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

__all__ = [
    "MIN_ZOOM_PERCENT",
    "MAX_ZOOM_PERCENT",
    "DEFAULT_ZOOM_PERCENT",
    "DEFAULT_PIXEL_SCALE",
    "NO_IMAGE",
    "ViewportSnapshot",
    "ViewportState",
    "clamp_zoom",
]

MIN_ZOOM_PERCENT = 25.0
MAX_ZOOM_PERCENT = 5000.0
DEFAULT_ZOOM_PERCENT = 100.0
# Arcseconds per native pixel when the image metadata does not say.
DEFAULT_PIXEL_SCALE = 0.031
NO_IMAGE: Tuple[int, int] = (0, 0)


def clamp_zoom(percent: float) -> float:
    """Clamp a zoom percentage to the supported range."""
    return max(MIN_ZOOM_PERCENT, min(MAX_ZOOM_PERCENT, float(percent)))


@dataclass(frozen=True)
class ViewportSnapshot:
    """Read-only copy of the viewport state handed to consumers.

    Parameters
    ----------
    zoom_percent : float
        Current zoom, 100 means native size.
    pan_offset : tuple[float, float]
        (x, y) translation in display pixels.
    native_size : tuple[int, int]
        (width, height) of the loaded image; (0, 0) when none is loaded.
    pixel_scale : float
        Arcseconds per native pixel at 100% zoom.
    """

    zoom_percent: float
    pan_offset: Tuple[float, float]
    native_size: Tuple[int, int]
    pixel_scale: float

    @property
    def zoom_factor(self) -> float:
        return self.zoom_percent / 100.0

    @property
    def has_image(self) -> bool:
        return self.native_size[0] > 0 and self.native_size[1] > 0


class ViewportState:
    """Mutable viewport state owned by a single session.

    Notes
    -----
    Only the zoom controller and the image-load path mutate this object.
    ``zoom_percent`` always stays within
    ``[MIN_ZOOM_PERCENT, MAX_ZOOM_PERCENT]``.
    """

    def __init__(self, default_pixel_scale: float = DEFAULT_PIXEL_SCALE) -> None:
        self._default_pixel_scale = float(default_pixel_scale)
        self.zoom_percent = DEFAULT_ZOOM_PERCENT
        self.pan_offset: Tuple[float, float] = (0.0, 0.0)
        self.native_size: Tuple[int, int] = NO_IMAGE
        self.pixel_scale = self._default_pixel_scale

    @property
    def has_image(self) -> bool:
        return self.native_size[0] > 0 and self.native_size[1] > 0

    def set_image(self, native_size: Tuple[int, int], pixel_scale: Optional[float] = None) -> None:
        """Install a newly loaded image and reset zoom/pan."""
        width, height = native_size
        self.native_size = (max(0, int(width)), max(0, int(height)))
        if pixel_scale is None or not math.isfinite(pixel_scale) or pixel_scale <= 0:
            pixel_scale = self._default_pixel_scale
        self.pixel_scale = float(pixel_scale)
        self.zoom_percent = DEFAULT_ZOOM_PERCENT
        self.pan_offset = (0.0, 0.0)

    def clear_image(self) -> None:
        """Return to the "no image" sentinel."""
        self.set_image(NO_IMAGE, None)

    def set_zoom(self, percent: float) -> float:
        """Set the zoom percentage, clamped to bounds; returns the stored value."""
        if math.isfinite(percent):
            self.zoom_percent = clamp_zoom(percent)
        return self.zoom_percent

    def set_pan(self, offset: Tuple[float, float]) -> None:
        x, y = offset
        self.pan_offset = (float(x), float(y))

    def snapshot(self) -> ViewportSnapshot:
        return ViewportSnapshot(
            zoom_percent=self.zoom_percent,
            pan_offset=self.pan_offset,
            native_size=self.native_size,
            pixel_scale=self.pixel_scale,
        )
