"""Bulk ingestion of documents into an existing index."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Sequence

from aoss_rag.clients import aoss
from aoss_rag.config import rag
from aoss_rag.errors import BackendError, IngestionError, VectorDimensionError

from .schema import FILE_NAME_FIELD, SOURCE_FIELD, TEXT_FIELD, VECTOR_FIELD

logger = logging.getLogger(__name__)


def _is_sequence(value: Any) -> bool:
    return hasattr(value, "__len__") and hasattr(value, "__iter__") and not isinstance(value, (str, bytes, dict))


def _as_vector(value: Any) -> List[float]:
    if not _is_sequence(value):
        raise VectorDimensionError(f"{VECTOR_FIELD} is missing or not a sequence")
    try:
        return [float(x) for x in value]
    except (TypeError, ValueError) as e:
        raise VectorDimensionError(f"{VECTOR_FIELD} must contain only numbers: {e}") from e


@dataclass(slots=True)
class Document:
    """One unit of ingested content."""

    vector: Sequence[float]
    text: str
    source: str
    file_name: str

    def to_body(self) -> Dict[str, Any]:
        return {
            VECTOR_FIELD: _as_vector(self.vector),
            TEXT_FIELD: self.text,
            SOURCE_FIELD: self.source,
            FILE_NAME_FIELD: self.file_name,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Document":
        """Build from either short keys (``vector``/``text``/...) or stored field names."""
        if not isinstance(data, dict):
            raise IngestionError(f"Document must be a JSON object, got {type(data).__name__}")
        return cls(
            vector=data.get("vector", data.get(VECTOR_FIELD)) or [],
            text=str(data.get("text", data.get(TEXT_FIELD, ""))),
            source=str(data.get("source", data.get(SOURCE_FIELD, ""))),
            file_name=str(data.get("file_name", data.get(FILE_NAME_FIELD, ""))),
        )


def build_bulk_payload(index: str, documents: Iterable[Document]) -> List[Dict[str, Any]]:
    """Format ``documents`` as alternating bulk action / body entries for ``index``."""

    payload: List[Dict[str, Any]] = []
    for doc in documents:
        payload.append({"index": {"_index": index}})
        payload.append(doc.to_body())
    return payload


def _check_dimensions(payload: Sequence[Dict[str, Any]]) -> None:
    dim = rag.EMB_DIM
    for pos, entry in enumerate(payload):
        if not isinstance(entry, dict) or VECTOR_FIELD not in entry:
            continue
        vector = entry[VECTOR_FIELD]
        if not _is_sequence(vector):
            raise VectorDimensionError(f"Bulk entry {pos} has a missing or non-sequence {VECTOR_FIELD}")
        size = len(vector)
        if size != dim:
            raise VectorDimensionError(
                f"Bulk entry {pos} has a {size}-dimensional {VECTOR_FIELD}; index expects {dim}"
            )


def _item_failures(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    failures: List[Dict[str, Any]] = []
    for item in response.get("items") or []:
        for action, result in item.items():
            if isinstance(result, dict) and result.get("error"):
                failures.append({"action": action, **result})
    return failures


async def insert(payload: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Write a pre-built bulk payload in a single request.

    :param payload: Alternating action and document entries.
    :returns: ``{"message": ..., "ids": [...]}`` with the backend-assigned ids.
    :raises VectorDimensionError: A document vector does not match ``rag.EMB_DIM``.
    :raises IngestionError: The backend rejected the request or any item.
    """
    if not payload:
        return {"message": "Successfully inserted data", "ids": []}

    _check_dimensions(payload)

    try:
        response = await aoss.bulk(payload)
    except BackendError as e:
        logger.error("error inserting documents: %s", e)
        raise IngestionError(f"Bulk write rejected: {e}") from e

    response = response or {}
    if response.get("errors"):
        failures = _item_failures(response)
        logger.error("Bulk write reported %d failed item(s)", len(failures))
        raise IngestionError(
            f"Bulk write reported {len(failures)} failed item(s)", items=failures
        )

    ids = [
        result.get("_id")
        for item in response.get("items") or []
        for result in item.values()
        if isinstance(result, dict)
    ]
    logger.info("Inserted %d document(s)", len(ids))
    return {"message": "Successfully inserted data", "ids": ids}
