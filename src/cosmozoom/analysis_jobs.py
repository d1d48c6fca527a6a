"""Single-flight background runner for detection analysis.

Analysis is modelled as a cooperatively-suspending job: it steps through a
list of named processing phases (to give the UI progress feedback), then
samples a detection batch. At most one run may be in flight; a second
request is rejected with ``BUSY`` rather than queued.

Invariants
----------
- A rejected request never affects the run already in flight.
- Cancellation is cooperative and checked between phases.
- Sampler failures are reported as an ``error`` result, never raised.
"""

from __future__ import annotations

import threading
import time
import traceback
import uuid
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence, Tuple

from cosmozoom.detection_sampler import Detection, DetectionSampler
from cosmozoom.logger import get_logger

LOGGER = get_logger(__name__)

__all__ = [
    "ANALYSIS_PHASES",
    "AnalysisStatus",
    "AnalysisTicket",
    "AnalysisResult",
    "CancelToken",
    "AnalysisRunner",
]

# (message, duration in milliseconds)
ANALYSIS_PHASES: Tuple[Tuple[str, int], ...] = (
    ("Loading detection models", 600),
    ("Preprocessing image data and noise reduction", 800),
    ("Scanning image regions", 1400),
    ("Detecting morphological features", 1100),
    ("Analyzing spectral signatures and color profiles", 1000),
    ("Classifying celestial objects", 900),
    ("Cross-referencing catalogs", 700),
    ("Calculating confidence scores", 600),
    ("Generating detailed metadata", 500),
)


class AnalysisStatus(str, Enum):
    STARTED = "started"
    BUSY = "busy"
    NO_IMAGE = "no_image"
    COMPLETE = "complete"
    CANCELLED = "cancelled"
    ERROR = "error"


class CancelToken:
    """Thread-safe cancellation token.

    Notes
    -----
    Cancellation is cooperative: the runner checks ``is_cancelled()``
    between phases.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._cancelled = False

    def cancel(self) -> None:
        with self._lock:
            self._cancelled = True

    def is_cancelled(self) -> bool:
        with self._lock:
            return self._cancelled


@dataclass(frozen=True)
class AnalysisResult:
    """Outcome of one analysis run."""

    job_id: str
    status: AnalysisStatus
    detections: Tuple[Detection, ...] = ()
    message: str = ""


@dataclass(frozen=True)
class AnalysisTicket:
    """Answer to a submit request.

    ``future`` is only set when ``status`` is ``STARTED``; it resolves to an
    :class:`AnalysisResult`.
    """

    status: AnalysisStatus
    job_id: Optional[str] = None
    future: Optional["Future[AnalysisResult]"] = None

    @property
    def accepted(self) -> bool:
        return self.status == AnalysisStatus.STARTED


class AnalysisRunner:
    """Run detection sampling on a worker thread, one run at a time."""

    def __init__(
        self,
        sampler: DetectionSampler,
        *,
        phases: Sequence[Tuple[str, int]] = ANALYSIS_PHASES,
        delay_scale: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.sampler = sampler
        self.phases = tuple(phases)
        self.delay_scale = float(delay_scale)
        self._sleep = sleep
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="cosmozoom-analysis")
        self._lock = threading.Lock()
        self._active: Optional[Tuple[str, CancelToken]] = None

    @property
    def busy(self) -> bool:
        with self._lock:
            return self._active is not None

    @property
    def active_job_id(self) -> Optional[str]:
        with self._lock:
            return self._active[0] if self._active else None

    def submit(
        self,
        image_key: str = "",
        *,
        on_progress: Optional[Callable[[int, str], None]] = None,
        on_result: Optional[Callable[[AnalysisResult], None]] = None,
    ) -> AnalysisTicket:
        """Start a run unless one is already in flight."""
        token = CancelToken()
        job_id = f"job-{uuid.uuid4().hex[:8]}"
        with self._lock:
            if self._active is not None:
                LOGGER.info("Analysis already in progress", extra={"job_id": self._active[0]})
                return AnalysisTicket(AnalysisStatus.BUSY)
            self._active = (job_id, token)
        future = self._executor.submit(self._run, job_id, image_key, token, on_progress, on_result)
        return AnalysisTicket(AnalysisStatus.STARTED, job_id, future)

    def cancel(self) -> None:
        """Request cancellation of the run in flight, if any."""
        with self._lock:
            if self._active is not None:
                self._active[1].cancel()

    def shutdown(self, wait: bool = True) -> None:
        self.cancel()
        self._executor.shutdown(wait=wait)

    def _report(self, on_progress: Optional[Callable[[int, str], None]], value: int, message: str) -> None:
        if on_progress is not None:
            on_progress(int(max(0, min(100, value))), message)

    def _run(
        self,
        job_id: str,
        image_key: str,
        token: CancelToken,
        on_progress: Optional[Callable[[int, str], None]],
        on_result: Optional[Callable[[AnalysisResult], None]],
    ) -> AnalysisResult:
        log_extra = {"job_id": job_id}
        LOGGER.info("Analysis started for %s", image_key or "<unnamed>", extra=log_extra)
        result: AnalysisResult
        try:
            total = len(self.phases) + 1
            for index, (message, duration_ms) in enumerate(self.phases):
                if token.is_cancelled():
                    break
                self._report(on_progress, index * 100 // total, f"{message}...")
                self._sleep(duration_ms / 1000.0 * self.delay_scale)
            if token.is_cancelled():
                result = AnalysisResult(job_id, AnalysisStatus.CANCELLED, message="Analysis cancelled")
                LOGGER.info("Analysis cancelled", extra=log_extra)
            else:
                detections = tuple(self.sampler.sample(image_key))
                self._report(on_progress, 100, f"{len(detections)} objects detected")
                result = AnalysisResult(job_id, AnalysisStatus.COMPLETE, detections)
                LOGGER.info("Analysis complete: %d detections", len(detections), extra=log_extra)
        except Exception as exc:
            LOGGER.error("Analysis failed\n%s", traceback.format_exc(), extra=log_extra)
            result = AnalysisResult(job_id, AnalysisStatus.ERROR, message=f"Analysis failed: {exc}")
        finally:
            with self._lock:
                if self._active is not None and self._active[0] == job_id:
                    self._active = None
        if on_result is not None:
            on_result(result)
        return result
