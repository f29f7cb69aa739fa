"""Mock vision file store for testing."""

from atelier.providers.media.base import VisionFileStore


class MockVisionFileStore(VisionFileStore):
    """Returns sequential fake file ids and records uploaded paths."""

    def __init__(self, prefix: str = "file-mock") -> None:
        self._prefix = prefix
        self.uploaded: list[str] = []

    async def upload(self, image_path: str) -> str:
        self.uploaded.append(image_path)
        return f"{self._prefix}-{len(self.uploaded)}"
