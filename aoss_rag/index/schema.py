"""Fixed mapping for every index managed by :mod:`aoss_rag`."""

from __future__ import annotations

from typing import Any, Dict

VECTOR_FIELD = "langchain_vector"
TEXT_FIELD = "langchain_text"
SOURCE_FIELD = "langchain_source"
FILE_NAME_FIELD = "langchain_file_name"

# keyword sub-field used for exact matching on the deletion key
FILE_NAME_KEYWORD = f"{FILE_NAME_FIELD}.keyword"

# ignore_above caps for each keyword sub-field
TEXT_KEYWORD_CAP = 1800
SOURCE_KEYWORD_CAP = 20000
FILE_NAME_KEYWORD_CAP = 250


def _text_with_keyword(cap: int) -> Dict[str, Any]:
    return {
        "type": "text",
        "fields": {
            "keyword": {
                "type": "keyword",
                "ignore_above": cap,
            },
        },
    }


def index_body(dimension: int) -> Dict[str, Any]:
    """Return the ``indices.create`` body for a k-NN index of ``dimension``."""

    return {
        "settings": {
            "index": {
                "knn": True,
            },
        },
        "mappings": {
            "properties": {
                VECTOR_FIELD: {
                    "type": "knn_vector",
                    "dimension": int(dimension),
                },
                TEXT_FIELD: _text_with_keyword(TEXT_KEYWORD_CAP),
                SOURCE_FIELD: _text_with_keyword(SOURCE_KEYWORD_CAP),
                FILE_NAME_FIELD: _text_with_keyword(FILE_NAME_KEYWORD_CAP),
            },
        },
    }
