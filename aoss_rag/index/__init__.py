"""
Public façade for the index lifecycle and retrieval pipeline
============================================================

Stable, async API. Import from here::

    from aoss_rag.index import create_index, insert, delete_by_file_name, search, ...
"""

from __future__ import annotations

from .deletion import DeletionReport, delete_by_file_name, purge_file_name
from .ingest import Document, build_bulk_payload, insert
from .manager import (
    IndexProbe,
    IndexSummary,
    create_index,
    drop,
    ensure_index,
    index_exists,
    list_index_names,
    list_indices,
    probe_index,
)
from .retrieval import SearchHit, find_by_file_name, perform_search

search = perform_search

# Limit the public surface (keeps star-imports clean)
__all__ = [
    "list_indices",
    "list_index_names",
    "drop",
    "create_index",
    "ensure_index",
    "index_exists",
    "probe_index",
    "insert",
    "build_bulk_payload",
    "delete_by_file_name",
    "purge_file_name",
    "perform_search",
    "search",
    "find_by_file_name",
    "Document",
    "DeletionReport",
    "IndexProbe",
    "IndexSummary",
    "SearchHit",
]
