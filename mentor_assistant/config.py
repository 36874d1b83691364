"""
Runtime configuration for Mentor Assistant.

All settings come from environment variables (optionally seeded from a .env
file) and are read once at startup into a frozen Settings instance that is
handed to the app factory.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

PROVIDERS = ("gemini", "foundry")
EXTRACTION_STRATEGIES = ("span", "balanced")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(ValueError):
    """Raised when an environment variable holds an unusable value."""


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("true", "1", "yes")


def _env_seconds(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number of seconds, got {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


@dataclass(frozen=True)
class Settings:
    mock_mode: bool = False
    ai_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.5-flash"
    azure_ai_project_endpoint: str = ""
    model_router_deployment: str = "model-router"
    firebase_project_id: str = ""
    firebase_client_email: str = ""
    firebase_private_key: str = ""
    firebase_credentials_path: str = ""
    store_timeout_seconds: float = 10.0
    provider_timeout_seconds: float = 60.0
    extraction_strategy: str = "span"
    strict_output_validation: bool = False
    mock_data_file: Path | None = None
    log_level: str = "INFO"
    otel_exporter_otlp_endpoint: str = ""
    otel_console_export: bool = True
    port: int = 3000

    def __post_init__(self) -> None:
        if self.ai_provider not in PROVIDERS:
            raise ConfigError(
                f"AI_PROVIDER must be one of {', '.join(PROVIDERS)}, got {self.ai_provider!r}"
            )
        if self.extraction_strategy not in EXTRACTION_STRATEGIES:
            raise ConfigError(
                "EXTRACTION_STRATEGY must be one of "
                f"{', '.join(EXTRACTION_STRATEGIES)}, got {self.extraction_strategy!r}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {self.log_level!r}")

    @classmethod
    def from_env(cls, dotenv: bool = True) -> "Settings":
        """Build settings from the process environment."""
        if dotenv:
            load_dotenv()

        port_raw = os.environ.get("PORT", "3000")
        try:
            port = int(port_raw)
        except ValueError:
            raise ConfigError(f"PORT must be an integer, got {port_raw!r}")

        mock_data_file = os.environ.get("MOCK_DATA_FILE", "")

        return cls(
            mock_mode=_env_flag("MOCK_MODE"),
            ai_provider=os.environ.get("AI_PROVIDER", "gemini").lower(),
            # The misspelled name is what existing deployments export.
            gemini_api_key=os.environ.get("GEMINI_API_KEY") or os.environ.get("GEMENI_API_KEY", ""),
            gemini_model=os.environ.get("GEMINI_MODEL", "gemini-2.5-flash"),
            azure_ai_project_endpoint=os.environ.get("AZURE_AI_PROJECT_ENDPOINT", ""),
            model_router_deployment=os.environ.get("MODEL_ROUTER_DEPLOYMENT", "model-router"),
            firebase_project_id=os.environ.get("FIREBASE_PROJECT_ID", ""),
            firebase_client_email=os.environ.get("FIREBASE_CLIENT_EMAIL", ""),
            firebase_private_key=os.environ.get("FIREBASE_PRIVATE_KEY", "").replace("\\n", "\n"),
            firebase_credentials_path=os.environ.get("FIREBASE_CREDENTIALS_PATH", ""),
            store_timeout_seconds=_env_seconds("STORE_TIMEOUT_SECONDS", 10.0),
            provider_timeout_seconds=_env_seconds("PROVIDER_TIMEOUT_SECONDS", 60.0),
            extraction_strategy=os.environ.get("EXTRACTION_STRATEGY", "span").lower(),
            strict_output_validation=_env_flag("STRICT_OUTPUT_VALIDATION"),
            mock_data_file=Path(mock_data_file) if mock_data_file else None,
            log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
            otel_exporter_otlp_endpoint=os.environ.get("OTEL_EXPORTER_OTLP_ENDPOINT", ""),
            otel_console_export=_env_flag("OTEL_CONSOLE_EXPORT", "true"),
            port=port,
        )
