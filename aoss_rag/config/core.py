import os

from .loader import section


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = section(config)

        openai_env = str(cfg.get("openai_key_env", "OPENAI_API_KEY"))

        self.OPENAI_API_KEY: str | None = os.getenv(openai_env)
        self.OPENAI_BASE_URL: str | None = cfg.get("openai_base_url") or os.getenv("OPENAI_BASE_URL")
