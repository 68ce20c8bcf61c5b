"""Server-Sent-Events endpoint for incremental diet plan generation"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse

from api.dependencies import get_optional_user
from domain.models import User
from domain.schemas import StreamGenerationRequest
from services.ai_service import ai_service

router = APIRouter(prefix="/api", tags=["Generation"])
logger = logging.getLogger("dietplanner.api.stream")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_sse_event(event: dict) -> str:
    """One ``data: <json>`` frame followed by a blank line"""
    return f"data: {json.dumps(event, default=str)}\n\n"


@router.post("/generate-diet-plan-stream")
async def generate_diet_plan_stream(
    body: StreamGenerationRequest,
    user: Optional[User] = Depends(get_optional_user),
):
    """
    Stream a week of meals as it is generated.

    Authentication is optional; anonymous callers get meals built from
    default profile values. Nothing is persisted here, clients save the
    finished plan with the ``saveDietPlan`` mutation.
    """
    request = body.input
    logger.info(f"stream_started user_id={user.id if user else None} plan_name={request.name!r}")

    async def event_generator():
        async for event in ai_service.stream_diet_plan(user, request):
            yield format_sse_event(event)
        logger.info(f"stream_finished user_id={user.id if user else None}")

    return StreamingResponse(event_generator(), media_type="text/event-stream", headers=SSE_HEADERS)
