"""Central, testable coordinate transformation utilities.

Single source of truth for pointer/container/native-pixel conversions and
the approximate celestial readout. All functions are Qt-free and total:
degenerate input (no image loaded, zero-sized rects, non-positive zoom)
returns zero-valued results instead of raising.

Conventions
-----------
- Points and pixel coordinates are (x, y).
- Sizes are (width, height); (0, 0) means "no image loaded".
- Rects are (left, top, width, height) in client/display pixels.
- The rendered image is assumed to be scaled by a transform, so its
  bounding rect is ``zoom_factor`` times its layout size.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

__all__ = [
    "ApproxCelestial",
    "DistanceMeasurement",
    "container_to_image_pixel",
    "image_pixel_to_container",
    "is_inside_image",
    "clip_to_image",
    "image_pixel_to_approx_celestial",
    "format_ra",
    "format_dec",
    "effective_pixel_scale",
    "visible_native_extent",
    "measure_distance",
    "round_half_up",
]

Rect = Tuple[float, float, float, float]
Size = Tuple[float, float]


@dataclass(frozen=True)
class ApproxCelestial:
    """Readable, non-physical sky position derived linearly from a pixel."""

    ra: str
    dec: str
    ra_hours: float
    dec_degrees: float


@dataclass(frozen=True)
class DistanceMeasurement:
    """Distance between two points in pixels and approximate arc units."""

    pixels: int
    arcseconds: str
    arcminutes: str


def round_half_up(value: float) -> int:
    """Round to the nearest integer with .5 going up (JS ``Math.round``)."""
    return int(math.floor(value + 0.5))


def _unscaled_extent(rendered: float, zoom_percent: float) -> float:
    zoom_factor = zoom_percent / 100.0
    if zoom_factor <= 0:
        return 0.0
    return rendered / zoom_factor


def container_to_image_pixel(
    pointer_x: float,
    pointer_y: float,
    container_rect: Rect,
    image_rect: Rect,
    zoom_percent: float,
    native_size: Size,
) -> Tuple[float, float]:
    """Map a container-relative pointer position to native pixel coordinates.

    Parameters
    ----------
    pointer_x, pointer_y : float
        Pointer position relative to the container's top-left corner.
    container_rect : tuple[float, float, float, float]
        Container bounding box (left, top, width, height).
    image_rect : tuple[float, float, float, float]
        Rendered image bounding box (left, top, width, height) in the same
        client space as ``container_rect``.
    zoom_percent : float
        Zoom applied to the rendered image.
    native_size : tuple[float, float]
        Native (width, height) of the image.

    Returns
    -------
    px, py : tuple[float, float]
        Native pixel coordinates. Not clipped: values fall outside
        ``[0, native_size]`` when the pointer is off the image.
    """
    native_w, native_h = native_size
    c_left, c_top = container_rect[0], container_rect[1]
    i_left, i_top, i_w, i_h = image_rect
    layout_w = _unscaled_extent(i_w, zoom_percent)
    layout_h = _unscaled_extent(i_h, zoom_percent)
    px = 0.0
    py = 0.0
    if native_w > 0 and layout_w > 0:
        px = (pointer_x - (i_left - c_left)) / layout_w * native_w
    if native_h > 0 and layout_h > 0:
        py = (pointer_y - (i_top - c_top)) / layout_h * native_h
    return px, py


def image_pixel_to_container(
    px: float,
    py: float,
    container_rect: Rect,
    image_rect: Rect,
    zoom_percent: float,
    native_size: Size,
) -> Tuple[float, float]:
    """Inverse of :func:`container_to_image_pixel`.

    Returns the container-relative pointer position that maps to the given
    native pixel under the same rects and zoom.
    """
    native_w, native_h = native_size
    c_left, c_top = container_rect[0], container_rect[1]
    i_left, i_top, i_w, i_h = image_rect
    layout_w = _unscaled_extent(i_w, zoom_percent)
    layout_h = _unscaled_extent(i_h, zoom_percent)
    x = i_left - c_left
    y = i_top - c_top
    if native_w > 0:
        x += px / native_w * layout_w
    if native_h > 0:
        y += py / native_h * layout_h
    return x, y


def is_inside_image(px: float, py: float, native_size: Size) -> bool:
    """True when a native pixel coordinate lies on the loaded image."""
    native_w, native_h = native_size
    if native_w <= 0 or native_h <= 0:
        return False
    return 0 <= px <= native_w and 0 <= py <= native_h


def clip_to_image(px: float, py: float, native_size: Size) -> Tuple[float, float]:
    """Clamp a native pixel coordinate onto the image bounds."""
    native_w, native_h = native_size
    return (
        max(0.0, min(float(max(native_w, 0)), px)),
        max(0.0, min(float(max(native_h, 0)), py)),
    )


def _fraction(value: float, extent: float) -> float:
    if extent <= 0:
        return 0.0
    return value / extent


def format_ra(hours_total: float) -> str:
    """Format decimal hours as ``HHh MMm SSs`` by truncation."""
    hours = math.floor(hours_total)
    minutes = math.floor((hours_total - hours) * 60)
    seconds = math.floor(((hours_total - hours) * 60 - minutes) * 60)
    return f"{hours:02d}h {minutes:02d}m {seconds:02d}s"


def format_dec(degrees_total: float) -> str:
    """Format decimal degrees as ``+DD° MM' SS"`` by truncation.

    Degrees are floored, so the sign is carried by the degree field and
    the minute/second fields are always shown as magnitudes.
    """
    degrees = math.floor(degrees_total)
    minutes = math.floor((degrees_total - degrees) * 60)
    seconds = math.floor(((degrees_total - degrees) * 60 - minutes) * 60)
    sign = "+" if degrees >= 0 else ""
    return f"{sign}{degrees}° {abs(minutes):02d}' {abs(seconds):02d}\""


def image_pixel_to_approx_celestial(px: float, py: float, native_size: Size) -> ApproxCelestial:
    """Project a native pixel onto a linear RA/Dec-like readout.

    RA spans 0-24h across the image width and Dec spans -90..+90 degrees
    down the image height. This is a placeholder readout, not a WCS solution.
    """
    native_w, native_h = native_size
    ra_hours = _fraction(px, native_w) * 24.0
    dec_degrees = _fraction(py, native_h) * 180.0 - 90.0
    return ApproxCelestial(
        ra=format_ra(ra_hours),
        dec=format_dec(dec_degrees),
        ra_hours=ra_hours,
        dec_degrees=dec_degrees,
    )


def effective_pixel_scale(pixel_scale: float, zoom_percent: float) -> str:
    """Arcseconds per display pixel at the given zoom, e.g. ``0.0310"/px``."""
    zoom_factor = zoom_percent / 100.0
    value = pixel_scale / zoom_factor if zoom_factor > 0 else 0.0
    return f'{value:.4f}"/px'


def visible_native_extent(native_size: Size, zoom_percent: float) -> Tuple[int, int]:
    """Native pixels spanned by one viewport extent at the given zoom."""
    native_w, native_h = native_size
    zoom_factor = zoom_percent / 100.0
    if zoom_factor <= 0 or native_w <= 0 or native_h <= 0:
        return 0, 0
    return round_half_up(native_w / zoom_factor), round_half_up(native_h / zoom_factor)


def measure_distance(
    point1: Tuple[float, float], point2: Tuple[float, float], pixel_scale: float
) -> DistanceMeasurement:
    """Straight-line distance between two points with an arcsecond estimate."""
    dx = point2[0] - point1[0]
    dy = point2[1] - point1[1]
    pixel_distance = math.hypot(dx, dy)
    angular = pixel_distance * pixel_scale
    return DistanceMeasurement(
        pixels=round_half_up(pixel_distance),
        arcseconds=f"{angular:.3f}",
        arcminutes=f"{angular / 60:.3f}",
    )
