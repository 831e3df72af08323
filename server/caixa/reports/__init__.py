from .errors import NotFoundError, ReportError, UpstreamError, ValidationError
from .records import Basis, EffectiveStatus, StoredStatus

__all__ = [
    "Basis",
    "EffectiveStatus",
    "NotFoundError",
    "ReportError",
    "StoredStatus",
    "UpstreamError",
    "ValidationError",
]
