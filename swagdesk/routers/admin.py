"""
Request management endpoints (authenticated).
"""

from fastapi import APIRouter, Response

from swagdesk import db
from swagdesk.dependencies import AdminSession
from swagdesk.models import (
    AnalyticsSummary,
    PromoCodeAnalytics,
    SuccessResponse,
    SwagRequest,
)
from swagdesk.services import analytics
from swagdesk.services.swag_requests import (
    approve_swag_request,
    delete_swag_request,
    export_csv,
    export_filename,
)

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get(
    "/requests",
    response_model=list[SwagRequest],
    operation_id="listRequests",
    summary="List unexpired swag requests, newest first",
)
async def list_requests(_: AdminSession) -> list[SwagRequest]:
    return await db.list_active_requests(db.utcnow())


@router.post(
    "/requests/{request_id}/approve",
    response_model=SuccessResponse,
    operation_id="approveRequest",
    summary="Approve a request and notify the requester",
)
async def approve_request(request_id: int, _: AdminSession) -> SuccessResponse:
    await approve_swag_request(request_id)
    return SuccessResponse(message="Request approved")


@router.delete(
    "/requests/{request_id}",
    response_model=SuccessResponse,
    operation_id="deleteRequest",
    summary="Delete a request",
)
async def delete_request(request_id: int, _: AdminSession) -> SuccessResponse:
    await delete_swag_request(request_id)
    return SuccessResponse(message="Request deleted")


@router.get(
    "/export-csv",
    operation_id="exportCsv",
    summary="Download approved requests as CSV",
    response_class=Response,
)
async def export_approved(_: AdminSession) -> Response:
    now = db.utcnow()
    requests = await db.list_approved_requests(now)
    return Response(
        content=export_csv(requests),
        media_type="text/csv",
        headers={
            "Content-Disposition": f'attachment; filename="{export_filename(now)}"',
        },
    )


# ── Analytics ──────────────────────────────────────────────────────────────


@router.get(
    "/analytics/summary",
    response_model=AnalyticsSummary,
    operation_id="getAnalyticsSummary",
    summary="Request counts by status",
)
async def analytics_summary(_: AdminSession) -> AnalyticsSummary:
    return await analytics.summary(db.utcnow())


@router.get(
    "/analytics/promo-codes",
    response_model=PromoCodeAnalytics,
    operation_id="getPromoCodeAnalytics",
    summary="Most used promo codes",
)
async def analytics_promo_codes(_: AdminSession) -> PromoCodeAnalytics:
    return await analytics.promo_codes(db.utcnow())
