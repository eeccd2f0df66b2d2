"""Pydantic models for tfinspect configuration."""

from pydantic import BaseModel, Field, field_validator


class ExtractionSettings(BaseModel):
    """How files are processed."""
    max_workers: int = Field(4, ge=1, description="Number of files extracted in parallel")
    strict: bool = Field(False, description="Raise on unreadable or unparsable files")

    class Config:
        frozen = True
        extra = "forbid"


class DiscoverySettings(BaseModel):
    """Which files belong to a module."""
    include_overrides: bool = Field(True, description="Apply override files after primary files")

    class Config:
        frozen = True
        extra = "forbid"


class LoggingSettings(BaseModel):
    level: str = Field("INFO", description="Log level name")

    class Config:
        frozen = True
        extra = "forbid"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value}")
        return level


class InspectConfig(BaseModel):
    """Complete, validated configuration."""
    extraction: ExtractionSettings = Field(default_factory=ExtractionSettings)
    discovery: DiscoverySettings = Field(default_factory=DiscoverySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        frozen = True
        extra = "forbid"
