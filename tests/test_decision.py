"""Tests for the threshold decision engine."""

import pytest

from cmod.config import ModerationConfig
from cmod.moderation.decision import DecisionEngine, Thresholds, decide
from cmod.moderation.models import Decision


@pytest.mark.parametrize("count", [0, 1, 2])
def test_below_warn_threshold_is_none(count):
    assert decide(count) == Decision.NONE


@pytest.mark.parametrize("count", [3, 4])
def test_between_thresholds_is_warn(count):
    assert decide(count) == Decision.WARN


@pytest.mark.parametrize("count", [5, 6, 100])
def test_at_or_above_delete_threshold_is_delete(count):
    assert decide(count) == Decision.DELETE


def test_custom_thresholds():
    engine = DecisionEngine(Thresholds(warn=1, delete=2))
    assert engine.decide(0) == Decision.NONE
    assert engine.decide(1) == Decision.WARN
    assert engine.decide(2) == Decision.DELETE


def test_equal_thresholds_skip_warning():
    engine = DecisionEngine(Thresholds(warn=4, delete=4))
    assert engine.decide(3) == Decision.NONE
    assert engine.decide(4) == Decision.DELETE


def test_thresholds_from_config():
    config = ModerationConfig(warn_threshold=2, delete_threshold=10, store_dir="unused")
    engine = DecisionEngine(Thresholds.from_config(config))
    assert engine.decide(9) == Decision.WARN
    assert engine.decide(10) == Decision.DELETE


def test_negative_count_rejected():
    with pytest.raises(ValueError):
        decide(-1)


def test_inverted_thresholds_rejected():
    with pytest.raises(ValueError):
        Thresholds(warn=6, delete=5)
