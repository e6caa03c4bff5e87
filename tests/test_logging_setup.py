# tests/test_logging_setup.py
import logging

import pytest

from backend.app.logging_setup import NOISY_LOGGERS, RECOMMENDER_LOGGER, parse_level, setup_logging


@pytest.fixture(autouse=True)
def restore_levels():
    names = (RECOMMENDER_LOGGER,) + NOISY_LOGGERS
    saved = {name: logging.getLogger(name).level for name in names}
    yield
    for name, level in saved.items():
        logging.getLogger(name).setLevel(level)


@pytest.mark.parametrize(
    "raw,expected",
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("bogus", logging.INFO), (None, logging.INFO), ("", logging.INFO)],
)
def test_parse_level(raw, expected):
    assert parse_level(raw) == expected


def test_recommender_level_follows_root_by_default():
    setup_logging("ERROR")
    assert logging.getLogger(RECOMMENDER_LOGGER).level == logging.ERROR


def test_recommender_level_override():
    setup_logging("INFO", recommender_level="debug")
    assert logging.getLogger(RECOMMENDER_LOGGER).level == logging.DEBUG
    assert logging.getLogger("backend.recommender.engine").isEnabledFor(logging.DEBUG)


def test_noisy_loggers_never_below_warning():
    setup_logging("DEBUG")
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING

    setup_logging("ERROR")
    for name in NOISY_LOGGERS:
        assert logging.getLogger(name).level == logging.ERROR
