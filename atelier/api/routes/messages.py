"""Inbound message endpoint."""

from fastapi import APIRouter

from atelier.api.dependencies import EngineDep
from atelier.api.models.messages import MessageRequest, MessageResponse
from atelier.observability.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.post("/messages", response_model=MessageResponse)
async def handle_message(request: MessageRequest, engine: EngineDep) -> MessageResponse:
    """Run one turn for an inbound channel message.

    A failed turn still returns 200 with the apology reply and `error`
    set; only a missing sender identity is rejected.
    """
    logger.debug("message_received", has_image=bool(request.image_path or request.file_id))
    result = await engine.handle_message(request.to_inbound())
    return MessageResponse.from_result(result)
