import os

from .loader import as_int, section


class Rag:
    def __init__(self, config: dict | None = None) -> None:
        rag_cfg = section(config, "retrieval")
        self.EMB_MODEL_ID: str = str(rag_cfg.get("emb_model_id", os.getenv("EMB_MODEL_ID", "text-embedding-3-small")))
        self.EMB_DIM: int = as_int("EMB_DIM", rag_cfg.get("emb_dim", os.getenv("EMB_DIM", "1536")), minimum=1)
        self.DEFAULT_K: int = as_int("DEFAULT_K", rag_cfg.get("default_k", os.getenv("DEFAULT_K", "5")))
