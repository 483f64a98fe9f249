"""
Core configuration module for the Pokémon GO Team Optimizer.

This module manages all application settings using Pydantic Settings,
providing type-safe configuration with environment variable support.
"""

from typing import Optional, Dict, Any
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be overridden via environment variables (case-insensitive)
    or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        # Allow extra fields for forward compatibility
        extra="allow",
    )

    # Application settings
    environment: str = "development"
    log_level: str = "INFO"

    # Logfire settings
    logfire_token: str = ""
    logfire_service_name: str = "teambuilder-cli"
    logfire_environment: str = "development"
    logfire_send_to_logfire: bool = False

    # Knowledge base settings
    data_dir: str = Field(default="./data", description="Directory holding pokemon.json, moves.json and rankings")
    ranking_bracket: str = Field(default="", description="CP bracket filter for the candidate pool, e.g. cp1500")
    meta_threat_count: int = Field(default=100, ge=1)

    # Optimizer defaults
    optimizer_population_size: int = Field(default=150, ge=2)
    optimizer_generations: int = Field(default=75, ge=1)
    optimizer_mutation_rate: float = Field(default=0.2, ge=0.0, le=1.0)
    optimizer_crossover_rate: float = Field(default=0.8, ge=0.0, le=1.0)
    optimizer_tournament_size: int = Field(default=3, ge=1)
    optimizer_random_seed: Optional[int] = None

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        """Accept log levels in any case."""
        if isinstance(v, str):
            v = v.strip().upper()
            if v not in ("DEBUG", "INFO", "WARNING", "ERROR"):
                raise ValueError(f"Unsupported log level: {v}")
        return v

    @field_validator("optimizer_random_seed", mode="before")
    @classmethod
    def empty_seed_is_none(cls, v):
        """Treat an empty environment value as no seed."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def get_logfire_settings(self) -> Dict[str, Any]:
        """Get Logfire configuration."""
        return {
            "token": self.logfire_token or None,
            "service_name": self.logfire_service_name,
            "environment": self.logfire_environment,
        }

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment.lower() == "production"

    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment.lower() == "development"


# Create global settings instance
settings = Settings()
