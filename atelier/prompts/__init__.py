"""Prompt templates."""

from atelier.prompts.repository import FilePromptRepository, PromptRepository

__all__ = ["FilePromptRepository", "PromptRepository"]
