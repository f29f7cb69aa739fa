"""Prompt template repository."""

from abc import ABC, abstractmethod
from importlib import resources
from pathlib import Path

from atelier.errors import PromptNotFoundError


class PromptRepository(ABC):
    """Returns prompt text by logical key."""

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the template for key.

        Raises:
            PromptNotFoundError: If no template exists for key
        """
        pass


class FilePromptRepository(PromptRepository):
    """Reads `<key>.txt` files from a directory, caching them after first use.

    With no directory the templates bundled with the package are used.
    """

    def __init__(self, directory: str | Path | None = None) -> None:
        if directory is None:
            self._root = resources.files("atelier.prompts") / "templates"
        else:
            self._root = Path(directory)
        self._cache: dict[str, str] = {}

    def get(self, key: str) -> str:
        if key in self._cache:
            return self._cache[key]
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise PromptNotFoundError(key)

        template = self._root / f"{key}.txt"
        if not template.is_file():
            raise PromptNotFoundError(key)
        text = template.read_text(encoding="utf-8").strip()
        self._cache[key] = text
        return text
