import os

from .loader import as_float, as_int, section


class OpenSearch:
    def __init__(self, config: dict | None = None) -> None:
        os_cfg = section(config, "opensearch")
        self.OPENSEARCH_ENDPOINT: str = str(os_cfg.get("endpoint", os.getenv("OPENSEARCH_ENDPOINT", "")))
        self.AWS_REGION: str = str(os_cfg.get("region", os.getenv("AWS_REGION", "us-west-2")))
        self.OPENSEARCH_SERVICE: str = str(os_cfg.get("service", os.getenv("OPENSEARCH_SERVICE", "aoss")))
        self.OPENSEARCH_TIMEOUT: float = as_float(
            "OPENSEARCH_TIMEOUT", os_cfg.get("timeout", os.getenv("OPENSEARCH_TIMEOUT", "30"))
        )
        # Index name used by the connection probe; it does not need to exist.
        self.OPENSEARCH_PROBE_INDEX: str = str(
            os_cfg.get("probe_index", os.getenv("OPENSEARCH_PROBE_INDEX", "test"))
        )
        self.DELETE_SEARCH_CAP: int = as_int(
            "DELETE_SEARCH_CAP",
            os_cfg.get("delete_search_cap", os.getenv("DELETE_SEARCH_CAP", "9999")),
            minimum=1,
        )
        self.DELETE_CONCURRENCY: int = as_int(
            "DELETE_CONCURRENCY",
            os_cfg.get("delete_concurrency", os.getenv("DELETE_CONCURRENCY", "8")),
            minimum=1,
        )
