"""Helpers for interacting with the OpenAI embeddings API"""
from __future__ import annotations

import numpy as np
from openai import AsyncOpenAI, OpenAIError

from aoss_rag.config import core, rag
from aoss_rag.errors import EmbeddingError

import logging
logger = logging.getLogger(__name__)

# One global async-capable client, built on first use
_client: AsyncOpenAI | None = None


def _get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        try:
            _client = AsyncOpenAI(api_key=core.OPENAI_API_KEY, base_url=core.OPENAI_BASE_URL)
        except OpenAIError as e:
            raise EmbeddingError(f"OpenAI client unavailable: {e}") from e
    return _client


async def embed_text(text: str, model: str | None = None) -> np.ndarray:
    """
    Return a float32 numpy vector for ``text`` using OpenAI embeddings.

    Model defaults to ``rag.EMB_MODEL_ID``. Provider failures and vectors whose
    length differs from ``rag.EMB_DIM`` raise :class:`EmbeddingError`; there is
    no retry.
    """
    use_model = model or rag.EMB_MODEL_ID
    try:
        resp = await _get_client().embeddings.create(model=use_model, input=text)
    except OpenAIError as e:
        logger.error("Embedding request failed (model=%s): %s", use_model, e)
        raise EmbeddingError(f"Embedding request failed for model {use_model}: {e}") from e

    if not resp.data:
        raise EmbeddingError(f"Embedding response for model {use_model} contained no data")

    vec = np.asarray(resp.data[0].embedding, dtype=np.float32)
    dim = rag.EMB_DIM
    if vec.size != dim:
        raise EmbeddingError(f"Unexpected embedding size {vec.size} != {dim} for model {use_model}")

    return vec


async def close() -> None:
    """Close the shared client if one was built."""
    global _client
    if _client is not None:
        await _client.close()
        _client = None
