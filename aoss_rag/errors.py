"""Exception types raised by the index lifecycle and retrieval pipeline."""

from __future__ import annotations

from typing import Any, List

__all__ = [
    "AossRagError",
    "BackendError",
    "IngestionError",
    "VectorDimensionError",
    "EmbeddingError",
    "ConfigurationError",
]


class AossRagError(RuntimeError):
    """Base class for every error surfaced by :mod:`aoss_rag`."""

    pass


class BackendError(AossRagError):
    """Raised when the OpenSearch backend rejects or fails a request.

    ``status_code`` and ``info`` carry the backend's original response so
    callers can inspect it; the ``opensearchpy`` exception is kept as
    ``__cause__``.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: Any = None,
        info: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.info = info

    @property
    def not_found(self) -> bool:
        return self.status_code == 404

    @property
    def document_missing(self) -> bool:
        """404 for a document id in an index that exists (``"result": "not_found"``)."""
        return self.not_found and isinstance(self.info, dict) and self.info.get("result") == "not_found"


class IngestionError(AossRagError):
    """Raised when a bulk write is rejected or reports item failures."""

    def __init__(self, message: str, *, items: List[dict] | None = None) -> None:
        super().__init__(message)
        self.items: List[dict] = list(items or [])


class VectorDimensionError(IngestionError):
    """Raised before submission when a document vector has the wrong length."""

    pass


class EmbeddingError(AossRagError):
    """Raised when the embedding provider fails to return a usable vector."""

    pass


class ConfigurationError(AossRagError, ValueError):
    """Raised when settings are missing or malformed."""

    pass
