"""API request and response models."""

from atelier.api.models.errors import ErrorBody, ErrorCode, ErrorDetail, ErrorResponse
from atelier.api.models.health import HealthResponse
from atelier.api.models.messages import MessageRequest, MessageResponse

__all__ = [
    "ErrorBody",
    "ErrorCode",
    "ErrorDetail",
    "ErrorResponse",
    "HealthResponse",
    "MessageRequest",
    "MessageResponse",
]
