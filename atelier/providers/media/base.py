"""Media file store interface.

Images arrive as stored paths. Vision models need them registered with
the provider first, which yields a file reference usable in prompts.
"""

from abc import ABC, abstractmethod


class VisionFileStore(ABC):
    """Registers images with the model provider."""

    @abstractmethod
    async def upload(self, image_path: str) -> str:
        """Upload an image and return its provider file reference.

        Raises:
            UpstreamError: If the image cannot be read or registered
        """
        pass

    async def ensure_file_id(self, image_path: str, file_id: str | None = None) -> str:
        """Reuse an existing file reference or upload the image."""
        if file_id:
            return file_id
        return await self.upload(image_path)
