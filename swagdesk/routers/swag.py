"""
Public swag request submission.
"""

from fastapi import APIRouter, Request

from swagdesk.db import utcnow
from swagdesk.models import SuccessResponse, SwagRequestInput
from swagdesk.rate_limit import SUBMIT, limiter
from swagdesk.services.swag_requests import submit_swag_request

router = APIRouter(prefix="/api", tags=["swag"])


@router.post(
    "/swag-request",
    response_model=SuccessResponse,
    operation_id="submitSwagRequest",
    summary="Submit a swag shipment request",
)
@limiter.limit(SUBMIT)
async def submit(request: Request, body: SwagRequestInput) -> SuccessResponse:
    await submit_swag_request(body, now=utcnow())
    return SuccessResponse(message="Swag request submitted successfully")
