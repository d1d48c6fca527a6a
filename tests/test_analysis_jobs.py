"""Tests for the single-flight analysis runner."""

import threading

import pytest

from cosmozoom.analysis_jobs import (
    ANALYSIS_PHASES,
    AnalysisRunner,
    AnalysisStatus,
    CancelToken,
)
from cosmozoom.detection_sampler import DetectionSampler

TIMEOUT = 5.0


class GatedSleep:
    """Sleep replacement that blocks until the test opens the gate."""

    def __init__(self):
        self.entered = threading.Event()
        self.gate = threading.Event()

    def __call__(self, seconds):
        self.entered.set()
        self.gate.wait(TIMEOUT)


@pytest.fixture
def gated():
    return GatedSleep()


@pytest.fixture
def make_runner():
    runners = []

    def _make(sampler, **kwargs):
        runner = AnalysisRunner(sampler, **kwargs)
        runners.append(runner)
        return runner

    yield _make
    for runner in runners:
        runner.shutdown(wait=True)


def test_cancel_token():
    token = CancelToken()
    assert not token.is_cancelled()
    token.cancel()
    assert token.is_cancelled()


def test_default_phases():
    assert len(ANALYSIS_PHASES) == 9
    assert all(ms > 0 for _, ms in ANALYSIS_PHASES)


class TestAnalysisRunner:
    def test_run_completes_with_detections(self, sampler, make_runner):
        runner = make_runner(sampler, delay_scale=0.0)
        ticket = runner.submit("carina.png")
        assert ticket.accepted
        assert ticket.job_id.startswith("job-")
        result = ticket.future.result(timeout=TIMEOUT)
        assert result.status == AnalysisStatus.COMPLETE
        assert result.job_id == ticket.job_id
        assert 5 <= len(result.detections) <= 10
        assert all(d.image_key == "carina.png" for d in result.detections)
        assert not runner.busy

    def test_second_request_is_rejected_while_busy(self, sampler, make_runner, gated):
        runner = make_runner(sampler, phases=(("Scanning", 10),), sleep=gated)
        first = runner.submit("a")
        assert gated.entered.wait(TIMEOUT)
        assert runner.busy
        assert runner.active_job_id == first.job_id

        second = runner.submit("a")
        assert second.status == AnalysisStatus.BUSY
        assert second.job_id is None
        assert second.future is None

        gated.gate.set()
        result = first.future.result(timeout=TIMEOUT)
        assert result.status == AnalysisStatus.COMPLETE
        assert result.detections

    def test_runner_accepts_again_after_completion(self, sampler, make_runner):
        runner = make_runner(sampler, delay_scale=0.0)
        runner.submit().future.result(timeout=TIMEOUT)
        ticket = runner.submit()
        assert ticket.accepted
        ticket.future.result(timeout=TIMEOUT)

    def test_cancel_between_phases(self, sampler, make_runner, gated):
        runner = make_runner(sampler, phases=(("Loading", 10), ("Scanning", 10)), sleep=gated)
        ticket = runner.submit()
        assert gated.entered.wait(TIMEOUT)
        runner.cancel()
        gated.gate.set()
        result = ticket.future.result(timeout=TIMEOUT)
        assert result.status == AnalysisStatus.CANCELLED
        assert result.detections == ()

    def test_sampler_failure_is_reported(self, make_runner):
        runner = make_runner(DetectionSampler(catalog=()), delay_scale=0.0)
        received = []
        ticket = runner.submit(on_result=received.append)
        result = ticket.future.result(timeout=TIMEOUT)
        assert result.status == AnalysisStatus.ERROR
        assert "empty" in result.message
        assert received == [result]
        assert not runner.busy

    def test_progress_reports(self, sampler, make_runner):
        phases = (("Loading", 10), ("Scanning", 10), ("Classifying", 10))
        runner = make_runner(sampler, phases=phases, delay_scale=0.0)
        progress = []
        result = runner.submit(on_progress=lambda v, m: progress.append((v, m))).future.result(timeout=TIMEOUT)
        values = [v for v, _ in progress]
        assert values == [0, 25, 50, 100]
        assert progress[0][1] == "Loading..."
        assert progress[-1][1] == f"{len(result.detections)} objects detected"

    def test_delay_scale_applied_to_phase_durations(self, sampler, make_runner):
        slept = []
        runner = make_runner(sampler, phases=(("a", 600), ("b", 800)), delay_scale=0.5, sleep=slept.append)
        runner.submit().future.result(timeout=TIMEOUT)
        assert slept == [pytest.approx(0.3), pytest.approx(0.4)]

    def test_result_callback_sees_idle_runner(self, sampler, make_runner):
        runner = make_runner(sampler, delay_scale=0.0)
        seen = []
        ticket = runner.submit(on_result=lambda r: seen.append(runner.busy))
        ticket.future.result(timeout=TIMEOUT)
        assert seen == [False]
