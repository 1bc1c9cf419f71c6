from __future__ import annotations

from pydantic import BaseModel, Field, field_validator


class EnvironmentConfig(BaseModel):
    base_url: str = ""
    browser: str = "chrome"
    default_timeout_seconds: int = 10
    headless: bool = True

    @field_validator("browser")
    @classmethod
    def validate_browser(cls, value: str) -> str:
        normalized = value.lower()
        if normalized not in {"chrome", "firefox"}:
            raise ValueError(f"Unsupported browser: {value}")
        return normalized


class HealingConfig(BaseModel):
    enabled: bool = True
    confidence_threshold: float = 0.6
    artifacts_dir: str = "artifacts"
    persist_fingerprints: bool = False

    @field_validator("confidence_threshold")
    @classmethod
    def validate_threshold(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError("confidence_threshold must be between 0 and 1")
        return value


class SuiteConfig(BaseModel):
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)
    healing: HealingConfig = Field(default_factory=HealingConfig)
