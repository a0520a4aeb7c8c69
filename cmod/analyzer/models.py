"""Data models for content classification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Category(Enum):
    """Policy category assigned to a piece of content."""

    SEXUAL = "sexual"
    VIOLENCE = "violence"
    HATE = "hate"
    DRUGS = "drugs"
    SCAM = "scam"
    CLEAN = "clean"


# Most severe first. Used for category priority and for fail-closed results.
SEVERITY_ORDER: tuple[Category, ...] = (
    Category.SEXUAL,
    Category.VIOLENCE,
    Category.HATE,
    Category.SCAM,
    Category.DRUGS,
)
MOST_SEVERE = SEVERITY_ORDER[0]


@dataclass
class ClassificationResult:
    """The analyzer's verdict on one piece of text or one media reference."""

    category: Category = Category.CLEAN
    confidence: float = 0.0
    flagged_terms: list[str] = field(default_factory=list)
    is_appropriate: bool = True
    reasons: list[str] = field(default_factory=list)
    # Local media that has not been uploaded yet; re-check once stored.
    pending_verification: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category.value,
            "confidence": self.confidence,
            "flagged_terms": list(self.flagged_terms),
            "is_appropriate": self.is_appropriate,
            "reasons": list(self.reasons),
            "pending_verification": self.pending_verification,
        }


@dataclass
class PostModerationResult:
    """Combined verdict over a post's text, images and videos."""

    is_appropriate: bool
    category: Category = Category.CLEAN
    confidence: float = 0.0
    flagged_terms: list[str] = field(default_factory=list)
    reasons: list[str] = field(default_factory=list)
    text_result: ClassificationResult = field(default_factory=ClassificationResult)
    image_results: list[ClassificationResult] = field(default_factory=list)
    video_results: list[ClassificationResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_appropriate": self.is_appropriate,
            "category": self.category.value,
            "confidence": self.confidence,
            "flagged_terms": list(self.flagged_terms),
            "reasons": list(self.reasons),
            "text_result": self.text_result.to_dict(),
            "image_results": [r.to_dict() for r in self.image_results],
            "video_results": [r.to_dict() for r in self.video_results],
        }
