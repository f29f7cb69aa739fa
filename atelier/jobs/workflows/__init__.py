"""Hatchet workflow definitions.

- ExtractMemoriesWorkflow: extracts durable user facts from a closed conversation
"""

from atelier.jobs.workflows.memory_extraction import (
    ExtractMemoriesInput,
    ExtractMemoriesOutput,
    ExtractMemoriesWorkflow,
)

__all__ = [
    "ExtractMemoriesInput",
    "ExtractMemoriesOutput",
    "ExtractMemoriesWorkflow",
]
