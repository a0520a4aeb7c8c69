"""Heuristic content analyzer.

Classifies text by keyword containment and per-category regular
expressions, and media references by file name / URL terms only (binary
content is never inspected).  Every entry point fails closed: an exception
or a blown time budget yields an inappropriate, most-severe result with
confidence 1.0.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, Optional, Sequence
from urllib.parse import urlsplit

from cmod.analyzer.models import (
    MOST_SEVERE,
    Category,
    ClassificationResult,
    PostModerationResult,
)
from cmod.analyzer.rules import DEFAULT_RULES, CategoryRule
from cmod.errors import ClassificationError

log = logging.getLogger("cmod.analyzer")

LOCAL_MEDIA_SCHEMES = {"", "file", "content"}
LOCAL_MEDIA_CONFIDENCE = 0.3
REMOTE_MEDIA_CONFIDENCE = 0.7
MEDIA_FLAGGED_CONFIDENCE = 0.9
KEYWORD_DENSITY_DIVISOR = 5
MAX_REASON_TERMS = 5


def failed_closed(reason: str = "Moderation error") -> ClassificationResult:
    """Return the verdict used whenever classification cannot complete."""
    return ClassificationResult(
        category=MOST_SEVERE,
        confidence=1.0,
        flagged_terms=["moderation_error"],
        is_appropriate=False,
        reasons=[reason],
    )


def is_local_media(ref: str) -> bool:
    """True for references that point at a not-yet-uploaded local file."""
    scheme = urlsplit(ref).scheme.lower()
    # Single-letter schemes are Windows drive letters.
    return scheme in LOCAL_MEDIA_SCHEMES or len(scheme) == 1


class ContentAnalyzer:
    """Stateless classifier driven by a category rule table."""

    def __init__(
        self,
        rules: Sequence[CategoryRule] = DEFAULT_RULES,
        timeout: Optional[float] = 2.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.rules = tuple(rules)
        self.timeout = timeout
        self._clock = clock

    # -- guarded entry points -------------------------------------------

    def classify_text(self, text: str) -> ClassificationResult:
        return self._guarded(self._evaluate_text, text)

    def classify_media(self, ref: str) -> ClassificationResult:
        return self._guarded(self._evaluate_media, ref)

    def moderate_post(
        self,
        text: str,
        images: Iterable[str] = (),
        videos: Iterable[str] = (),
    ) -> PostModerationResult:
        """Classify every part of a post; the post passes only if all parts pass."""
        try:
            text_result = self.classify_text(text)
            image_results = [self.classify_media(ref) for ref in images]
            video_results = [self.classify_media(ref) for ref in videos]
        except Exception:
            log.exception("Post moderation failed; rejecting post")
            failed = failed_closed("Content moderation failed")
            return PostModerationResult(
                is_appropriate=False,
                category=failed.category,
                confidence=failed.confidence,
                flagged_terms=list(failed.flagged_terms),
                reasons=list(failed.reasons),
                text_result=failed,
            )
        return combine_results(text_result, image_results, video_results)

    def _guarded(
        self, evaluate: Callable[[str], ClassificationResult], value: str
    ) -> ClassificationResult:
        started = self._clock()
        try:
            result = evaluate(value)
            elapsed = self._clock() - started
            if self.timeout is not None and elapsed > self.timeout:
                raise ClassificationError(
                    f"Classification took {elapsed:.3f}s (budget {self.timeout:.3f}s)"
                )
            return result
        except Exception as exc:
            log.error("Classification failed, failing closed: %s", exc)
            return failed_closed()

    # -- evaluation -----------------------------------------------------

    def _evaluate_text(self, text: str) -> ClassificationResult:
        if not isinstance(text, str):
            raise ClassificationError(f"Expected text, got {type(text).__name__}")
        lowered = text.lower()

        flagged: list[str] = []
        for rule in self.rules:
            for keyword in rule.keywords:
                if keyword in lowered and keyword not in flagged:
                    flagged.append(keyword)

        matched_rules = [
            rule for rule in self.rules
            if any(p.search(text) for p in rule.patterns)
        ]

        category = Category.CLEAN
        confidence = 0.0
        if matched_rules:
            category = matched_rules[0].category
            confidence = max(rule.pattern_confidence for rule in matched_rules)
        elif flagged:
            category = self._category_of_keyword(flagged[0])
        if flagged:
            confidence = max(confidence, min(len(flagged) / KEYWORD_DENSITY_DIVISOR, 1.0))

        reasons = [rule.label for rule in matched_rules]
        if flagged:
            shown = ", ".join(flagged[:MAX_REASON_TERMS])
            more = "..." if len(flagged) > MAX_REASON_TERMS else ""
            reasons.append(f"Inappropriate language: {shown}{more}")

        return ClassificationResult(
            category=category,
            confidence=confidence,
            flagged_terms=flagged,
            is_appropriate=not flagged and not matched_rules,
            reasons=reasons,
        )

    def _evaluate_media(self, ref: str) -> ClassificationResult:
        if not isinstance(ref, str):
            raise ClassificationError(f"Expected a media reference, got {type(ref).__name__}")
        lowered = ref.lower()

        flagged: list[str] = []
        category = Category.CLEAN
        for rule in self.rules:
            hits = [t for t in rule.media_terms if t in lowered and t not in flagged]
            if hits and category is Category.CLEAN:
                category = rule.category
            flagged.extend(hits)

        if flagged:
            return ClassificationResult(
                category=category,
                confidence=MEDIA_FLAGGED_CONFIDENCE,
                flagged_terms=flagged,
                is_appropriate=False,
                reasons=["Inappropriate media file name detected"],
            )

        if is_local_media(ref):
            return ClassificationResult(
                confidence=LOCAL_MEDIA_CONFIDENCE,
                reasons=["Local file - content analysis pending"],
                pending_verification=True,
            )

        return ClassificationResult(confidence=REMOTE_MEDIA_CONFIDENCE)

    def _category_of_keyword(self, keyword: str) -> Category:
        for rule in self.rules:
            if keyword in rule.keywords:
                return rule.category
        return Category.CLEAN


def combine_results(
    text_result: ClassificationResult,
    image_results: list[ClassificationResult],
    video_results: list[ClassificationResult],
) -> PostModerationResult:
    """Fold per-part verdicts into one post verdict."""
    parts: list[tuple[str, ClassificationResult]] = [("text", text_result)]
    parts += [(f"image {i + 1}", r) for i, r in enumerate(image_results)]
    parts += [(f"video {i + 1}", r) for i, r in enumerate(video_results)]

    reasons: list[str] = []
    flagged: list[str] = []
    category = Category.CLEAN
    for label, result in parts:
        if result.is_appropriate:
            continue
        explanation = "; ".join(result.reasons) or "flagged"
        reasons.append(f"Inappropriate {label}: {explanation}")
        flagged.extend(t for t in result.flagged_terms if t not in flagged)
        if category is Category.CLEAN:
            category = result.category

    confidence = sum(r.confidence for _, r in parts) / len(parts)
    return PostModerationResult(
        is_appropriate=all(r.is_appropriate for _, r in parts),
        category=category,
        confidence=confidence,
        flagged_terms=flagged,
        reasons=reasons,
        text_result=text_result,
        image_results=image_results,
        video_results=video_results,
    )


_default_analyzer = ContentAnalyzer()


def classify(value: str, *, media: bool = False) -> ClassificationResult:
    """Classify text, or a media reference when *media* is set."""
    if media:
        return _default_analyzer.classify_media(value)
    return _default_analyzer.classify_text(value)


def moderate_post(
    text: str, images: Iterable[str] = (), videos: Iterable[str] = ()
) -> PostModerationResult:
    return _default_analyzer.moderate_post(text, images, videos)
