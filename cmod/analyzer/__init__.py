"""Heuristic content analyzer for text and media references."""

from cmod.analyzer.analyzer import ContentAnalyzer, classify, moderate_post
from cmod.analyzer.models import Category, ClassificationResult, PostModerationResult

__all__ = [
    "Category",
    "ClassificationResult",
    "ContentAnalyzer",
    "PostModerationResult",
    "classify",
    "moderate_post",
]
