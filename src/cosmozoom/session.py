"""Viewer session: owns viewport state and wires the core components.

The session is the explicit context object passed to input handlers. It
owns one :class:`ViewportState`, the :class:`ZoomController` that mutates
it, the analysis runner and the current detection batch.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from cosmozoom.analysis_jobs import AnalysisResult, AnalysisRunner, AnalysisStatus, AnalysisTicket
from cosmozoom.config import DEFAULT_CONFIG, ViewerConfig
from cosmozoom.detection_sampler import Detection, DetectionSampler
from cosmozoom.image_catalog import FALLBACK_IMAGE, ImageRecord, metadata_for, parse_resolution
from cosmozoom.image_loader import FileImageLoader, ImageLoader, ImageLoadError
from cosmozoom.logger import get_logger, set_level
from cosmozoom.overlay_projector import OverlayFrame, PixelInfo, PointerSample, project, project_pointer
from cosmozoom.viewport_state import ViewportSnapshot, ViewportState
from cosmozoom.zoom_controller import ZoomController

LOGGER = get_logger(__name__)

__all__ = ["LoadOutcome", "ViewerSession"]


@dataclass(frozen=True)
class LoadOutcome:
    """Result of an image load request.

    ``record`` describes the image actually shown, which is the fallback
    image when ``fell_back`` is true.
    """

    record: ImageRecord
    native_size: Tuple[int, int]
    fell_back: bool = False
    error: str = ""


class ViewerSession:
    """One viewport session and its collaborators."""

    def __init__(
        self,
        config: ViewerConfig = DEFAULT_CONFIG,
        *,
        loader: Optional[ImageLoader] = None,
        sampler: Optional[DetectionSampler] = None,
        runner: Optional[AnalysisRunner] = None,
        fallback: ImageRecord = FALLBACK_IMAGE,
    ) -> None:
        self.config = config
        set_level(config.log_level)
        self.state = ViewportState(default_pixel_scale=config.default_pixel_scale)
        self.zoom = ZoomController(self.state, config)
        self.loader = loader or FileImageLoader()
        self.runner = runner or AnalysisRunner(
            sampler or DetectionSampler(), delay_scale=config.analysis_delay_scale
        )
        self.fallback = fallback
        self.record: Optional[ImageRecord] = None
        self.container_size: Tuple[float, float] = (0.0, 0.0)
        self._detections: Tuple[Detection, ...] = ()
        self._current_job_id: Optional[str] = None
        self._lock = threading.Lock()

    # --- image loading -------------------------------------------------

    def load_image(self, source: str, record: Optional[ImageRecord] = None) -> LoadOutcome:
        """Load an image, falling back to the default image on failure."""
        record = record or metadata_for(source, self.config.upload_pixel_scale)
        try:
            size = self.loader.load(source)
        except ImageLoadError as exc:
            LOGGER.warning("Image load failed for %s: %s", source, exc)
            if source == self.fallback.source:
                size = parse_resolution(self.fallback.resolution) or (0, 0)
                outcome = LoadOutcome(self.fallback, size, fell_back=True, error=str(exc))
            else:
                LOGGER.info("Falling back to %s", self.fallback.title)
                fallback = self.load_image(self.fallback.source, self.fallback)
                return LoadOutcome(fallback.record, fallback.native_size, fell_back=True, error=str(exc))
        else:
            outcome = LoadOutcome(record, size)
        self._install(outcome.record, outcome.native_size)
        return outcome

    def _install(self, record: ImageRecord, size: Tuple[int, int]) -> None:
        self.state.set_image(size, record.pixel_scale)
        self.record = record
        with self._lock:
            self._detections = ()
            self._current_job_id = None
        self.runner.cancel()
        LOGGER.info("Image loaded: %s (%dx%d)", record.title, size[0], size[1])
        self.zoom.reset()

    # --- viewport -----------------------------------------------------

    def snapshot(self) -> ViewportSnapshot:
        return self.state.snapshot()

    def set_container_size(self, size: Tuple[float, float]) -> None:
        self.container_size = (float(size[0]), float(size[1]))

    def fit_to_frame(self) -> float:
        return self.zoom.fit_to_frame(self.container_size)

    def pointer_moved(
        self,
        x: float,
        y: float,
        container_rect: Tuple[float, float, float, float],
        image_rect: Tuple[float, float, float, float],
    ) -> PixelInfo:
        return project_pointer(PointerSample(x, y, container_rect, image_rect), self.snapshot())

    def overlay(self, pointer: Optional[PointerSample] = None) -> OverlayFrame:
        return project(self.detections, self.snapshot(), pointer, self.config.pixel_grid_threshold)

    # --- analysis -----------------------------------------------------

    @property
    def detections(self) -> Tuple[Detection, ...]:
        with self._lock:
            return self._detections

    def run_analysis(
        self,
        *,
        on_progress: Optional[Callable[[int, str], None]] = None,
        on_result: Optional[Callable[[AnalysisResult], None]] = None,
    ) -> AnalysisTicket:
        """Start a detection run for the current image.

        Returns a ``NO_IMAGE`` ticket before any image is loaded and a
        ``BUSY`` ticket while a run is in flight.
        """
        if self.record is None or not self.state.has_image:
            LOGGER.info("Analysis requested with no image loaded")
            return AnalysisTicket(AnalysisStatus.NO_IMAGE)

        def _on_result(result: AnalysisResult) -> None:
            self._accept(result)
            if on_result is not None:
                on_result(result)

        with self._lock:
            ticket = self.runner.submit(self.record.key, on_progress=on_progress, on_result=_on_result)
            if ticket.accepted:
                self._current_job_id = ticket.job_id
                self._detections = ()
        return ticket

    def _accept(self, result: AnalysisResult) -> None:
        with self._lock:
            if result.job_id != self._current_job_id:
                LOGGER.info("Discarding stale analysis result", extra={"job_id": result.job_id})
                return
            self._current_job_id = None
            if result.status == AnalysisStatus.COMPLETE:
                self._detections = result.detections

    def clear_detections(self) -> None:
        with self._lock:
            self._detections = ()

    # --- commands -----------------------------------------------------

    def handle_key(self, key: str, ctrl: bool = False) -> bool:
        """Dispatch a viewer shortcut; returns True when the key was handled.

        Zoom and fit keys work with or without ctrl held; analysis needs ctrl.
        """
        commands: List[Tuple[Tuple[str, ...], bool, Callable[[], object]]] = [
            (("+", "="), False, self.zoom.zoom_in),
            (("-",), False, self.zoom.zoom_out),
            (("0",), False, self.zoom.reset),
            (("f", "F"), False, self.fit_to_frame),
            (("a", "A"), True, self.run_analysis),
        ]
        for keys, needs_ctrl, action in commands:
            if key in keys and (ctrl or not needs_ctrl):
                action()
                return True
        return False

    def close(self) -> None:
        self.runner.shutdown(wait=False)
