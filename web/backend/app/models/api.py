"""Pydantic models for API request/response serialization.

These models mirror the cmod dataclasses and provide proper JSON
serialization for the FastAPI endpoints.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Classification models
# ---------------------------------------------------------------------------


class TextRequest(BaseModel):
    text: str = ""


class MediaRequest(BaseModel):
    media_ref: str


class PostRequest(BaseModel):
    text: str = ""
    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)


class ClassificationResponse(BaseModel):
    """Mirrors cmod.analyzer.models.ClassificationResult."""

    category: str
    confidence: float
    flagged_terms: list[str] = Field(default_factory=list)
    is_appropriate: bool
    reasons: list[str] = Field(default_factory=list)
    pending_verification: bool = False


class PostModerationResponse(BaseModel):
    """Mirrors cmod.analyzer.models.PostModerationResult."""

    is_appropriate: bool
    category: str
    confidence: float
    flagged_terms: list[str] = Field(default_factory=list)
    reasons: list[str] = Field(default_factory=list)
    text_result: ClassificationResponse
    image_results: list[ClassificationResponse] = Field(default_factory=list)
    video_results: list[ClassificationResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Content / report models
# ---------------------------------------------------------------------------


class SubmitContentRequest(BaseModel):
    author_id: str
    body: str = ""
    images: list[str] = Field(default_factory=list)
    videos: list[str] = Field(default_factory=list)


class ContentItemResponse(BaseModel):
    """Mirrors cmod.moderation.models.ContentItem."""

    id: str
    author_id: str
    body: str = ""
    media: list[str] = Field(default_factory=list)
    created_at: str = ""


class CreateReportRequest(BaseModel):
    reporter_id: str
    reason: Literal["inappropriate", "spam", "offensive", "other"] = "other"
    reporter_name: str = ""


class ReportResponse(BaseModel):
    """Mirrors cmod.moderation.models.Report."""

    id: str
    content_id: str
    reporter_id: str
    reason: str
    reporter_name: str = ""
    created_at: str = ""


class EvaluationResponse(BaseModel):
    """Outcome of re-evaluating a content item after a report."""

    report: ReportResponse
    report_count: int
    decision: str
    action_taken: bool = False


class ReportSummaryResponse(BaseModel):
    content_id: str
    count: int = 0
    reports: list[ReportResponse] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Administrative models
# ---------------------------------------------------------------------------


class ModerationActionResponse(BaseModel):
    """Mirrors cmod.moderation.models.ModerationAction."""

    id: str
    content_id: str
    action: str
    reason: str
    report_count: int = 0
    reports: list[ReportResponse] = Field(default_factory=list)
    created_at: str = ""
    is_admin_initiated: bool = False


class SweepResponse(BaseModel):
    """Mirrors cmod.moderation.models.SweepResult."""

    deleted_count: int = 0
    warned_count: int = 0
    processed_count: int = 0
    failed_count: int = 0


class HighReportItemResponse(BaseModel):
    item: ContentItemResponse
    report_count: int
    reports: list[ReportResponse] = Field(default_factory=list)


class AdminDeleteRequest(BaseModel):
    admin_id: str
    reason: str = ""


class AdminDeleteResponse(BaseModel):
    content_id: str
    deleted: bool
    action: ModerationActionResponse | None = None
