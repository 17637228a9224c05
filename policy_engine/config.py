"""Policy Engine — Application configuration via environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class EngineSettings(BaseSettings):
    """Central configuration loaded from environment / .env file."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "POLICY_ENGINE_",
        "extra": "ignore",
    }

    # ── Scheduler ──────────────────────────────────────────────
    implementation_capacity: int = 100
    random_seed: int | None = None

    # ── Persistence ────────────────────────────────────────────
    state_file: str = "policy_state.json"

    # ── Logging ────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"


settings = EngineSettings()
