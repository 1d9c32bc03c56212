"""Central configuration via Pydantic Settings. All values driven by env vars."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Completion service / Gemini
    google_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_grounded_model: str = "gemini-2.5-flash"
    gemini_temperature: float = 0.7
    gemini_max_tokens: int = 4096
    personalization_max_tokens: int = 400

    # Provider credentials (empty = hook not registered)
    google_places_api_key: str = ""
    tmdb_api_key: str = ""
    omdb_api_key: str = ""
    youtube_api_key: str = ""
    ticketmaster_api_key: str = ""
    newsapi_key: str = ""
    provider_http_timeout_s: float = 10.0
    provider_user_agent: str = "cao-engine/1.0 (verification)"

    # Candidate generation
    max_candidates: int = 10
    conversation_context_turns: int = 5

    # Verification
    default_verification_timeout_ms: int = 2000

    # Streaming
    stream_oversample_factor: float = 1.5
    stream_window: int = 3

    # Source discovery
    discovery_enabled: bool = True
    discovery_db_path: str = "data/discovery.db"
    discovery_min_sightings: int = 3
    discovery_max_sightings: int = 5
    discovery_max_evaluations_per_run: int = 5
    discovery_default_threshold: float = 5.0
    discovery_min_scores_for_quartile: int = 4

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    model_config = {"env_file": ".env", "env_prefix": "CAO_"}
