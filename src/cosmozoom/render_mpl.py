"""Matplotlib rendering adapter for the viewport and detection overlay.

Binds the pure data produced by the core (snapshots, overlay frames) to a
matplotlib Axes. The image is drawn in native pixel data coordinates with
the origin at the top-left, so overlay percentages map to
``percent / 100 * native_size``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Tuple

import matplotlib.axes
import matplotlib.patches as mpatches
import numpy as np

from cosmozoom.overlay_projector import PIXEL_GRID_THRESHOLD, OverlayFrame, PixelInfo
from cosmozoom.viewport_state import ViewportSnapshot

__all__ = [
    "OVERLAY_GID",
    "view_limits",
    "apply_viewport",
    "clear_overlay",
    "draw_overlay",
    "draw_pixel_info",
    "OverlayRenderer",
]

OVERLAY_GID = "cosmozoom-overlay"
# Skip the pixel grid when it would need more lines than this per axis.
MAX_GRID_LINES = 512


def view_limits(snapshot: ViewportSnapshot) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    """Axis limits ((x0, x1), (y_bottom, y_top)) for the current zoom/pan.

    The visible window is the native size divided by the zoom factor,
    centred on the image and shifted by the pan offset (display pixels).
    """
    width, height = snapshot.native_size
    if width <= 0 or height <= 0 or snapshot.zoom_factor <= 0:
        return (0.0, 1.0), (1.0, 0.0)
    zf = snapshot.zoom_factor
    visible_w = width / zf
    visible_h = height / zf
    cx = width / 2 - snapshot.pan_offset[0] / zf
    cy = height / 2 - snapshot.pan_offset[1] / zf
    return (cx - visible_w / 2, cx + visible_w / 2), (cy + visible_h / 2, cy - visible_h / 2)


def apply_viewport(ax: matplotlib.axes.Axes, snapshot: ViewportSnapshot) -> None:
    """Set axis limits so the axes show the current viewport."""
    xlim, ylim = view_limits(snapshot)
    ax.set_xlim(*xlim)
    ax.set_ylim(*ylim)


def clear_overlay(ax: matplotlib.axes.Axes) -> int:
    """Remove overlay artists from ``ax``; returns how many were removed."""
    artists = [a for a in list(ax.patches) + list(ax.texts) + list(ax.lines) if a.get_gid() == OVERLAY_GID]
    for artist in artists:
        artist.remove()
    return len(artists)


def _draw_pixel_grid(ax: matplotlib.axes.Axes) -> None:
    x0, x1 = sorted(ax.get_xlim())
    y0, y1 = sorted(ax.get_ylim())
    xs = np.arange(np.ceil(x0), np.floor(x1) + 1)
    ys = np.arange(np.ceil(y0), np.floor(y1) + 1)
    if len(xs) > MAX_GRID_LINES or len(ys) > MAX_GRID_LINES:
        return
    for x in xs:
        line = ax.axvline(x, color="white", alpha=0.15, linewidth=0.5)
        line.set_gid(OVERLAY_GID)
    for y in ys:
        line = ax.axhline(y, color="white", alpha=0.15, linewidth=0.5)
        line.set_gid(OVERLAY_GID)


def draw_pixel_info(ax: matplotlib.axes.Axes, info: PixelInfo) -> None:
    text = ax.text(
        0.01,
        0.99,
        info.as_text(),
        transform=ax.transAxes,
        va="top",
        ha="left",
        fontsize=8,
        color="white",
        bbox={"facecolor": "black", "alpha": 0.6, "edgecolor": "none"},
    )
    text.set_gid(OVERLAY_GID)


def draw_overlay(ax: matplotlib.axes.Axes, frame: OverlayFrame, native_size: Tuple[int, int]) -> List[mpatches.Rectangle]:
    """Replace the overlay on ``ax`` with the given frame.

    Returns the detection rectangles in draw order.
    """
    clear_overlay(ax)
    width, height = native_size
    rects: List[mpatches.Rectangle] = []
    if width > 0 and height > 0:
        for box in frame.boxes:
            x = box.left / 100.0 * width
            y = box.top / 100.0 * height
            rect = mpatches.Rectangle(
                (x, y),
                box.width / 100.0 * width,
                box.height / 100.0 * height,
                fill=False,
                edgecolor=box.color,
                linewidth=1.5,
                zorder=4,
            )
            rect.set_gid(OVERLAY_GID)
            ax.add_patch(rect)
            label = ax.text(x, y, box.label, color=box.color, fontsize=7, va="bottom", zorder=5)
            label.set_gid(OVERLAY_GID)
            rects.append(rect)
    if frame.pixel_grid:
        _draw_pixel_grid(ax)
    if frame.info is not None and frame.info.inside_image:
        draw_pixel_info(ax, frame.info)
    return rects


class OverlayRenderer:
    """Rendering surface: redraws one Axes when the viewport changes.

    Connect :meth:`on_view_changed` to the zoom controller. The controller
    keeps only a weak reference to bound methods, so the caller must keep
    the renderer alive.

    Notes
    -----
    On a view change the last frame is redrawn with its pixel-grid flag
    recomputed for the new zoom. Its pointer info was computed for the old
    zoom and is dropped until the next :meth:`render`.
    """

    def __init__(self, ax: matplotlib.axes.Axes, pixel_grid_threshold: float = PIXEL_GRID_THRESHOLD) -> None:
        self.ax = ax
        self.pixel_grid_threshold = pixel_grid_threshold
        self.image_artist = None
        self.native_size: Tuple[int, int] = (0, 0)
        self.last_frame: Optional[OverlayFrame] = None

    def show_image(self, data: np.ndarray) -> None:
        height, width = data.shape[:2]
        self.native_size = (int(width), int(height))
        extent = (0, width, height, 0)
        if self.image_artist is None:
            self.image_artist = self.ax.imshow(data, extent=extent, origin="upper", interpolation="nearest")
        else:
            self.image_artist.set_data(data)
            self.image_artist.set_extent(extent)

    def on_view_changed(self, snapshot: ViewportSnapshot) -> None:
        apply_viewport(self.ax, snapshot)
        if self.last_frame is not None:
            self.last_frame = replace(
                self.last_frame,
                info=None,
                pixel_grid=snapshot.zoom_percent > self.pixel_grid_threshold,
            )
            draw_overlay(self.ax, self.last_frame, snapshot.native_size)
        self.ax.figure.canvas.draw_idle()

    def render(self, frame: OverlayFrame, snapshot: ViewportSnapshot) -> List[mpatches.Rectangle]:
        self.last_frame = frame
        apply_viewport(self.ax, snapshot)
        rects = draw_overlay(self.ax, frame, snapshot.native_size)
        self.ax.figure.canvas.draw_idle()
        return rects
