"""Shared steps for generators that analyze a submitted photo."""

from typing import Any, TypeVar

from pydantic import BaseModel

from atelier.context.models import TurnContext
from atelier.generators.base import AdviceGenerator, ContextInput
from atelier.generators.replies import Reply, TextReply
from atelier.observability.logging import get_logger
from atelier.providers.llm.base import ModelMessage
from atelier.styling.models import Upload

logger = get_logger(__name__)

S = TypeVar("S", bound=BaseModel)


class ImageAdviceGenerator(AdviceGenerator[S]):
    """Generator whose prompt carries the turn's image.

    Without an image it asks for one and skips the model call. With one it
    resolves a model file reference, records an Upload and sends the image
    to the model.
    """

    upload_request: str
    context_inputs = frozenset({ContextInput.IMAGE, ContextInput.PROFILE})

    def precheck(self, context: TurnContext) -> list[Reply] | None:
        if context.inbound.has_image:
            return None
        return [TextReply(text=self.upload_request)]

    async def prepare(self, context: TurnContext) -> Upload:
        inbound = context.inbound
        file_id = await self._deps.vision_files.ensure_file_id(
            inbound.image_path or "", inbound.file_id
        )
        upload = await self._deps.styling_store.create_upload(
            Upload(user_id=context.user.id, image_path=inbound.image_path, file_id=file_id)
        )
        logger.info("upload_persisted", generator=self.name, upload_id=str(upload.id))
        return upload

    def build_prompt(self, context: TurnContext, prepared: Any) -> list[ModelMessage]:
        upload: Upload = prepared
        return [
            self.system_prompt(),
            *self.context_messages(context),
            ModelMessage.system(f"Intent: {self.name}"),
            ModelMessage.image(upload.file_id, text=context.inbound.text or None),
        ]
