"""Advice generators, one per intent."""

from atelier.generators.base import AdviceGenerator, ContextInput, GeneratorDeps
from atelier.generators.registry import GeneratorRegistry, build_registry
from atelier.generators.replies import (
    ImageReply,
    QuickReply,
    QuickReplyButton,
    Reply,
    TextReply,
)

__all__ = [
    "AdviceGenerator",
    "ContextInput",
    "GeneratorDeps",
    "GeneratorRegistry",
    "ImageReply",
    "QuickReply",
    "QuickReplyButton",
    "Reply",
    "TextReply",
    "build_registry",
]
