from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List

from aoss_rag.clients import aoss, oai

from .schema import FILE_NAME_KEYWORD, VECTOR_FIELD

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchHit:
    id: str
    index: str
    score: float | None
    source: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_hit(cls, hit: Dict[str, Any]) -> "SearchHit":
        score = hit.get("_score")
        return cls(
            id=str(hit.get("_id")),
            index=str(hit.get("_index", "")),
            score=float(score) if score is not None else None,
            source=dict(hit.get("_source") or {}),
        )


def join_indices(indices: str | Iterable[str]) -> str:
    """Return a comma-joined target for one index name or an iterable of names."""

    if isinstance(indices, str):
        return indices
    return ",".join(indices)


def _hits(response: Dict[str, Any]) -> List[SearchHit]:
    raw = ((response or {}).get("hits") or {}).get("hits") or []
    return [SearchHit.from_hit(h) for h in raw]


def knn_query(vector, k: int) -> Dict[str, Any]:
    return {
        "size": k,
        "query": {
            "knn": {
                VECTOR_FIELD: {
                    "vector": [float(x) for x in vector],
                    "k": k,
                }
            }
        },
    }


def file_name_query(file_name: str, size: int) -> Dict[str, Any]:
    return {
        "size": size,
        "query": {
            "term": {
                FILE_NAME_KEYWORD: {
                    "value": file_name,
                }
            }
        },
    }


async def perform_search(
    query: str,
    indices: str | Iterable[str],
    num_results: int = 5,
) -> List[SearchHit]:
    """Embed ``query`` and return the ``num_results`` nearest documents.

    Hits come back in the backend's similarity order across every target
    index; nothing is re-ranked or de-duplicated. ``num_results`` is passed
    through as-is.
    """

    qvec = await oai.embed_text(query)
    target = join_indices(indices)
    response = await aoss.search(target, knn_query(qvec, num_results))
    hits = _hits(response)
    logger.info("k-NN search on %s returned %d hit(s) (k=%d)", target, len(hits), num_results)
    return hits


async def find_by_file_name(
    file_name: str,
    indices: str | Iterable[str],
    size: int = 9999,
) -> List[SearchHit]:
    """Return documents whose originating file name is exactly ``file_name``."""

    response = await aoss.search(join_indices(indices), file_name_query(file_name, size))
    return _hits(response)
