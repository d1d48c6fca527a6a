"""CosmoZoom viewport and detection-sampling core."""

from cosmozoom.analysis_jobs import AnalysisResult, AnalysisRunner, AnalysisStatus
from cosmozoom.config import DEFAULT_CONFIG, ViewerConfig, load_config
from cosmozoom.detection_sampler import Detection, DetectionSampler
from cosmozoom.overlay_projector import OverlayFrame, PointerSample, project
from cosmozoom.session import ViewerSession
from cosmozoom.viewport_state import ViewportSnapshot, ViewportState
from cosmozoom.zoom_controller import ZoomController

__all__ = [
    "__version__",
    "AnalysisResult",
    "AnalysisRunner",
    "AnalysisStatus",
    "DEFAULT_CONFIG",
    "ViewerConfig",
    "load_config",
    "Detection",
    "DetectionSampler",
    "OverlayFrame",
    "PointerSample",
    "project",
    "ViewerSession",
    "ViewportSnapshot",
    "ViewportState",
    "ZoomController",
]

__version__ = "1.0.0"
