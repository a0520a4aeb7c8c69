"""Threshold decision engine: report count -> moderation decision."""

from __future__ import annotations

from dataclasses import dataclass

from cmod.config import ModerationConfig
from cmod.moderation.models import Decision


@dataclass(frozen=True)
class Thresholds:
    """Report-count thresholds. ``warn <= delete``."""

    warn: int = 3
    delete: int = 5

    def __post_init__(self) -> None:
        if self.warn < 0 or self.delete < 0:
            raise ValueError("Thresholds must be non-negative")
        if self.warn > self.delete:
            raise ValueError(f"warn threshold {self.warn} exceeds delete threshold {self.delete}")

    @classmethod
    def from_config(cls, config: ModerationConfig) -> Thresholds:
        return cls(warn=config.warn_threshold, delete=config.delete_threshold)


class DecisionEngine:
    """Stateless, total mapping from a report count to a decision.

    There is no transition back to ``NONE``: the engine only looks at the
    count it is given, and counts never go down.
    """

    def __init__(self, thresholds: Thresholds = Thresholds()) -> None:
        self.thresholds = thresholds

    def decide(self, report_count: int) -> Decision:
        if report_count < 0:
            raise ValueError(f"report_count must be non-negative, got {report_count}")
        if report_count >= self.thresholds.delete:
            return Decision.DELETE
        if report_count >= self.thresholds.warn:
            return Decision.WARN
        return Decision.NONE


def decide(report_count: int, thresholds: Thresholds = Thresholds()) -> Decision:
    return DecisionEngine(thresholds).decide(report_count)
