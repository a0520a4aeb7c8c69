"""Moderation router -- classification API plus the administrative surface.

Prefix: ``/api/moderation``
"""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException, Query

from cmod.config import load_config
from cmod.errors import ContentRejectedError, NotFoundError, PersistenceError
from cmod.moderation.service import ModerationService
from cmod.store.json_store import JsonFileStore
from web.backend.app.models.api import (
    AdminDeleteRequest,
    AdminDeleteResponse,
    ClassificationResponse,
    ContentItemResponse,
    CreateReportRequest,
    EvaluationResponse,
    HighReportItemResponse,
    MediaRequest,
    ModerationActionResponse,
    PostModerationResponse,
    PostRequest,
    ReportResponse,
    ReportSummaryResponse,
    SubmitContentRequest,
    SweepResponse,
    TextRequest,
)

router = APIRouter(prefix="/api/moderation", tags=["moderation"])

# ---------------------------------------------------------------------------
# Shared service instance (singleton for the running process)
# ---------------------------------------------------------------------------
_service: ModerationService | None = None


def get_service() -> ModerationService:
    global _service
    if _service is None:
        config = load_config()
        _service = ModerationService(JsonFileStore(config.store_dir), config)
    return _service


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _report_to_response(r) -> ReportResponse:
    return ReportResponse(**r.to_dict())


def _action_to_response(a) -> ModerationActionResponse:
    return ModerationActionResponse(**a.to_dict())


# =========================================================================
# Classification endpoints
# =========================================================================


@router.post("/text", response_model=ClassificationResponse)
async def moderate_text(request: TextRequest, service: ModerationService = Depends(get_service)):
    """Classify a piece of text."""
    return ClassificationResponse(**service.moderate_text(request.text).to_dict())


@router.post("/image", response_model=ClassificationResponse)
async def moderate_image(request: MediaRequest, service: ModerationService = Depends(get_service)):
    """Classify a media reference by its file name / URL."""
    return ClassificationResponse(**service.moderate_image(request.media_ref).to_dict())


@router.post("/post", response_model=PostModerationResponse)
async def moderate_post(request: PostRequest, service: ModerationService = Depends(get_service)):
    """Classify a whole post; it passes only if every part passes."""
    result = service.moderate_post(request.text, request.images, request.videos)
    return PostModerationResponse(**result.to_dict())


# =========================================================================
# Content and report endpoints
# =========================================================================


@router.post("/content", response_model=ContentItemResponse, status_code=201)
async def submit_content(
    request: SubmitContentRequest, service: ModerationService = Depends(get_service)
):
    """Store new content if it passes classification.

    Rejections return 422 with a generic message only.
    """
    try:
        item = service.submit_content(
            request.author_id, request.body, request.images, request.videos
        )
    except ContentRejectedError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return ContentItemResponse(**item.to_dict())


@router.get("/content/{content_id}", response_model=ContentItemResponse)
async def get_content(content_id: str, service: ModerationService = Depends(get_service)):
    try:
        item = service.require_content(content_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return ContentItemResponse(**item.to_dict())


@router.post("/content/{content_id}/reports", response_model=EvaluationResponse, status_code=201)
async def create_report(
    content_id: str,
    request: CreateReportRequest,
    service: ModerationService = Depends(get_service),
):
    """File a report and re-evaluate the content item."""
    try:
        report, evaluation = service.add_report(
            content_id, request.reporter_id, request.reason, request.reporter_name
        )
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return EvaluationResponse(
        report=_report_to_response(report),
        report_count=evaluation.report_count,
        decision=evaluation.decision.value,
        action_taken=evaluation.outcome.executed,
    )


@router.get("/content/{content_id}/reports", response_model=ReportSummaryResponse)
async def get_report_summary(content_id: str, service: ModerationService = Depends(get_service)):
    summary = service.get_report_summary(content_id)
    return ReportSummaryResponse(
        content_id=summary.content_id,
        count=summary.count,
        reports=[_report_to_response(r) for r in summary.reports],
    )


# =========================================================================
# Administrative endpoints
# =========================================================================


@router.post("/sweep", response_model=SweepResponse)
async def process_all_content(service: ModerationService = Depends(get_service)):
    """Run the reconciliation sweep over all content."""
    return SweepResponse(**asdict(service.process_all_content()))


@router.get("/high-reports", response_model=list[HighReportItemResponse])
async def get_high_report_items(
    threshold: int = Query(3, ge=0),
    service: ModerationService = Depends(get_service),
):
    """List content items with at least ``threshold`` reports."""
    return [
        HighReportItemResponse(
            item=ContentItemResponse(**entry.item.to_dict()),
            report_count=entry.report_count,
            reports=[_report_to_response(r) for r in entry.reports],
        )
        for entry in service.get_high_report_items(threshold)
    ]


@router.get("/logs", response_model=list[ModerationActionResponse])
async def get_moderation_logs(
    limit: int = Query(50, ge=1, le=1000),
    service: ModerationService = Depends(get_service),
):
    """Return the moderation audit log, newest first."""
    return [_action_to_response(a) for a in service.get_moderation_logs(limit)]


@router.delete("/content/{content_id}", response_model=AdminDeleteResponse)
async def admin_delete(
    content_id: str,
    request: AdminDeleteRequest,
    service: ModerationService = Depends(get_service),
):
    """Delete content regardless of its report count."""
    try:
        outcome = service.admin_delete(content_id, request.admin_id, request.reason)
    except PersistenceError as exc:
        raise HTTPException(status_code=503, detail=str(exc))
    return AdminDeleteResponse(
        content_id=content_id,
        deleted=outcome.executed,
        action=_action_to_response(outcome.action) if outcome.action else None,
    )
