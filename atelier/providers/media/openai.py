"""OpenAI Files API vision store."""

import os
from pathlib import Path

import openai
from openai import AsyncOpenAI

from atelier.errors import UpstreamError
from atelier.observability.logging import get_logger
from atelier.providers.media.base import VisionFileStore

logger = get_logger(__name__)


class OpenAIVisionFileStore(VisionFileStore):
    """Uploads images to OpenAI with purpose "vision"."""

    def __init__(
        self,
        api_key: str | None = None,
        timeout: float = 60.0,
        client: AsyncOpenAI | None = None,
    ):
        if client is None:
            api_key = api_key or os.environ.get("OPENAI_API_KEY")
            if not api_key:
                raise ValueError("OPENAI_API_KEY environment variable not set")
            client = AsyncOpenAI(api_key=api_key, timeout=timeout)
        self._client = client

    async def upload(self, image_path: str) -> str:
        path = Path(image_path)
        try:
            with path.open("rb") as f:
                created = await self._client.files.create(file=f, purpose="vision")
        except OSError as e:
            raise UpstreamError(f"Cannot read image: {image_path}", cause=e) from e
        except openai.APIError as e:
            raise UpstreamError(f"Image upload failed: {e}", cause=e) from e

        logger.info("vision_file_uploaded", file_id=created.id, image_name=path.name)
        return created.id
