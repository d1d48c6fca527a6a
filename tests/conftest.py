import os
from datetime import datetime, timezone

import matplotlib
import numpy as np
import pytest

# Rendering tests run headless.
os.environ.setdefault("MPLBACKEND", "Agg")
matplotlib.use(os.environ.get("MPLBACKEND", "Agg"), force=True)

from cosmozoom.analysis_jobs import AnalysisRunner
from cosmozoom.config import ViewerConfig
from cosmozoom.detection_sampler import DetectionSampler
from cosmozoom.image_loader import StaticImageLoader
from cosmozoom.session import ViewerSession
from cosmozoom.viewport_state import ViewportState


FIXED_TIME = datetime(2025, 10, 4, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def state() -> ViewportState:
    vp = ViewportState()
    vp.set_image((4096, 4096), 0.031)
    return vp


@pytest.fixture
def sampler() -> DetectionSampler:
    return DetectionSampler(rng=np.random.default_rng(42), clock=lambda: FIXED_TIME)


@pytest.fixture
def fast_config() -> ViewerConfig:
    return ViewerConfig(analysis_delay_scale=0.0)


@pytest.fixture
def session(sampler, fast_config):
    loader = StaticImageLoader(
        {
            "carina.png": (4096, 4096),
            "wide.png": (2000, 1158),
            "jwst-carina-nebula-default.png": (4096, 4096),
        }
    )
    runner = AnalysisRunner(sampler, delay_scale=0.0)
    sess = ViewerSession(fast_config, loader=loader, runner=runner)
    yield sess
    sess.close()
