"""Tests for the shared logger helpers."""

import logging

import pytest

from cosmozoom.logger import JobIdFilter, get_logger, set_level


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    handler = ListHandler()
    handler.addFilter(JobIdFilter())
    logging.getLogger("cosmozoom").addHandler(handler)
    yield handler
    logging.getLogger("cosmozoom").removeHandler(handler)
    set_level(logging.INFO)


def test_child_logger_names():
    assert get_logger("cosmozoom.session").name == "cosmozoom.session"
    assert get_logger("session").name == "cosmozoom.session"


def test_job_id_defaults_to_dash(captured):
    get_logger("test").info("hello")
    assert captured.records[-1].job_id == "-"


def test_job_id_from_extra(captured):
    get_logger("test").info("hello", extra={"job_id": "job-1234abcd"})
    assert captured.records[-1].job_id == "job-1234abcd"


def test_set_level_by_name(captured):
    set_level("WARNING")
    get_logger("test").info("hidden")
    assert captured.records == []
    assert logging.getLogger("cosmozoom").level == logging.WARNING


def test_set_level_unknown_name():
    with pytest.raises(ValueError):
        set_level("LOUD")
