"""Application settings and configuration."""

from __future__ import annotations

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Application-wide settings and configuration."""

    # General application settings
    app_name: str = Field(default="Swarm-Verify", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    # Reasoning backend
    reasoning_provider: Literal["gemini", "groq"] = Field(
        default="gemini", description="Which reasoning backend the agents call"
    )
    gemini_api_key: str = Field(default="", description="Google Gemini API key")
    gemini_model: str = Field(
        default="gemini-2.5-flash", description="Gemini model name"
    )
    groq_api_key: str = Field(default="", description="Groq API key")
    groq_model: str = Field(
        default="llama-3.3-70b-versatile", description="Groq model name"
    )

    # Optional search-grounded investigator agent
    investigator_api_key: str = Field(
        default="", description="Gemini API key for the Investigator agent"
    )
    investigator_model: str = Field(
        default="gemini-2.5-flash", description="Investigator model name"
    )

    # Agent execution
    agent_timeout_seconds: float = Field(
        default=12.0, description="Logical timeout applied to every agent call"
    )
    max_retries: int = Field(
        default=2, description="Retries for transient reasoning backend failures"
    )
    retry_backoff_seconds: float = Field(
        default=2.0, description="Initial backoff between retries (x1.5 each attempt)"
    )
    agent_temperature: float = Field(default=0.3, description="Agent temperature")
    second_pass_temperature: float = Field(
        default=0.1, description="Second-pass reviewer temperature"
    )
    max_output_tokens: int = Field(default=1024, description="Max generated tokens")

    # Consensus
    geometric_median_max_iterations: int = Field(
        default=100, description="Weiszfeld iteration cap"
    )
    geometric_median_tolerance: float = Field(
        default=1e-6, description="Weiszfeld convergence tolerance"
    )

    # Routing
    high_confidence_threshold: int = Field(
        default=90, description="Final confidence at or above which markets auto-resolve"
    )
    mid_confidence_threshold: int = Field(
        default=85, description="Final confidence at or above which a second pass runs"
    )

    # Multi-dimensional scoring
    multi_model_scoring_enabled: bool = Field(
        default=True, description="Blend dimension scores into the final confidence"
    )
    weight_factual: float = Field(default=0.45, description="Factual score weight")
    weight_consistency: float = Field(
        default=0.25, description="Consistency score weight"
    )
    weight_timestamp: float = Field(default=0.20, description="Timestamp score weight")
    weight_sentiment: float = Field(default=0.10, description="Sentiment score weight")

    second_pass_enabled: bool = Field(
        default=True, description="Run the second-pass reviewer for mid-band results"
    )

    # Web fact checker
    web_search_enabled: bool = Field(
        default=True, description="Enable the keyless instant-answer search agent"
    )
    web_search_url: str = Field(
        default="https://api.duckduckgo.com/",
        description="Instant-answer search endpoint",
    )

    # HTTP client settings
    default_timeout: float = Field(
        default=60.0, description="Default HTTP request timeout in seconds"
    )

    # Serving
    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8080, description="Bind port")
    app_url: str = Field(
        default="http://localhost:8080", description="Public base URL of the service"
    )
    cron_secret: str = Field(
        default="", description="Shared secret for the scheduled oracle sweep"
    )
    resolve_requests_per_minute: int = Field(
        default=10, description="Per-client resolution requests allowed per minute"
    )

    langfuse_host: str = Field(default="", description="Langfuse host")
    langfuse_public_key: str = Field(default="", description="Langfuse public key")
    langfuse_secret_key: str = Field(default="", description="Langfuse secret key")
    langfuse_tracing_environment: str = Field(
        default="", description="Langfuse tracing environment"
    )

    model_config = SettingsConfigDict(
        env_prefix="SWARM_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        validate_default=True,
    )

    @property
    def scoring_weights(self) -> dict[str, float]:
        return {
            "factual": self.weight_factual,
            "consistency": self.weight_consistency,
            "timestamp": self.weight_timestamp,
            "sentiment": self.weight_sentiment,
        }


# Create application settings instance
settings = AppSettings()
