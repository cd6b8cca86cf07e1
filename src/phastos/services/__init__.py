from .base import BaseService
from .errors import (
    ExternalCommandFailedError,
    IoFailedError,
    ServiceFailure,
    UnexpectedStateError,
    ValidationFailedError,
)

__all__ = [
    "BaseService",
    "ExternalCommandFailedError",
    "IoFailedError",
    "ServiceFailure",
    "UnexpectedStateError",
    "ValidationFailedError",
]
