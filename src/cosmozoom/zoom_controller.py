"""Zoom/pan commands for a viewport session.

Every command mutates the session's :class:`ViewportState` and then emits a
``"view_changed"`` notification carrying the new snapshot, so the rendering
surface only reacts to state updates.
"""

from __future__ import annotations

from typing import Callable, Optional, Tuple

from matplotlib import cbook

from cosmozoom.config import DEFAULT_CONFIG, ViewerConfig
from cosmozoom.coordinate_transforms import round_half_up
from cosmozoom.logger import get_logger
from cosmozoom.viewport_state import DEFAULT_ZOOM_PERCENT, ViewportSnapshot, ViewportState

LOGGER = get_logger(__name__)

VIEW_CHANGED = "view_changed"


class ZoomController:
    """Bounded zoom and pan commands.

    Invariants
    ----------
    - All commands are total; out-of-range results are clamped by the state.
    - One ``view_changed`` notification is emitted per command.
    """

    def __init__(self, state: ViewportState, config: ViewerConfig = DEFAULT_CONFIG) -> None:
        self.state = state
        self.config = config
        self.callbacks = cbook.CallbackRegistry(signals=[VIEW_CHANGED])

    def connect(self, callback: Callable[[ViewportSnapshot], None]) -> int:
        """Register a re-render callback; returns a connection id."""
        return self.callbacks.connect(VIEW_CHANGED, callback)

    def disconnect(self, cid: int) -> None:
        self.callbacks.disconnect(cid)

    def _changed(self, action: str) -> ViewportSnapshot:
        snapshot = self.state.snapshot()
        LOGGER.debug("%s -> %.2f%%", action, snapshot.zoom_percent)
        self.callbacks.process(VIEW_CHANGED, snapshot)
        return snapshot

    def zoom_in(self) -> float:
        self.state.set_zoom(self.state.zoom_percent * self.config.zoom_step)
        return self._changed("zoom_in").zoom_percent

    def zoom_out(self) -> float:
        self.state.set_zoom(self.state.zoom_percent / self.config.zoom_step)
        return self._changed("zoom_out").zoom_percent

    def set_zoom(self, percent: float) -> float:
        self.state.set_zoom(percent)
        return self._changed("set_zoom").zoom_percent

    def reset(self) -> float:
        """Return to 100% zoom with no pan."""
        self.state.set_zoom(DEFAULT_ZOOM_PERCENT)
        self.state.set_pan((0.0, 0.0))
        return self._changed("reset").zoom_percent

    def fit_to_frame(
        self,
        container_size: Tuple[float, float],
        native_size: Optional[Tuple[int, int]] = None,
    ) -> float:
        """Zoom so the image's limiting dimension fills the container.

        The image is fitted by width when it is relatively wider than the
        container, otherwise by height. Leaves the zoom unchanged when no
        image is loaded or the container has no area.
        """
        if native_size is None:
            native_size = self.state.native_size
        native_w, native_h = native_size
        container_w, container_h = container_size
        if native_w <= 0 or native_h <= 0 or container_w <= 0 or container_h <= 0:
            LOGGER.debug("fit_to_frame skipped: native=%s container=%s", native_size, container_size)
            return self.state.zoom_percent
        image_aspect = native_w / native_h
        container_aspect = container_w / container_h
        if image_aspect > container_aspect:
            percent = container_w / native_w * 100
        else:
            percent = container_h / native_h * 100
        self.state.set_zoom(percent)
        return self._changed("fit_to_frame").zoom_percent

    def wheel_zoom(self, delta_y: float) -> bool:
        """Zoom from a wheel event; negative delta zooms in.

        Returns ``True``: the caller must suppress the platform's default
        scroll for this event.
        """
        step = self.config.wheel_zoom_step
        if delta_y < 0:
            self.state.set_zoom(self.state.zoom_percent * step)
        else:
            self.state.set_zoom(self.state.zoom_percent / step)
        self._changed("wheel_zoom")
        return True

    def pan_to(self, offset: Tuple[float, float]) -> None:
        self.state.set_pan(offset)
        self._changed("pan_to")

    def pan_by(self, dx: float, dy: float) -> None:
        x, y = self.state.pan_offset
        self.pan_to((x + dx, y + dy))

    @property
    def pixel_grid_visible(self) -> bool:
        """Pixel grid overlay is shown at extreme magnification."""
        return self.state.zoom_percent > self.config.pixel_grid_threshold

    @property
    def zoom_label(self) -> str:
        return f"{round_half_up(self.state.zoom_percent)}%"

    @property
    def zoom_multiplier_label(self) -> str:
        multiplier = round_half_up(self.state.zoom_percent / 100 * 10) / 10
        return f"{multiplier:g}x"
