"""Configuration management for the contextualization pipeline."""

from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class DataConfig(BaseModel):
    """Locations of reference data and stories."""

    contexts_dir: Path = Path("data/contexts")
    stories_dir: Path = Path("data/stories")
    default_country: str = "US"

    @field_validator("contexts_dir", "stories_dir", mode="before")
    @classmethod
    def convert_to_path(cls, v):
        """Convert string to Path."""
        return Path(v) if isinstance(v, str) else v


class SourceConfig(BaseModel):
    """The country the stories were written about."""

    country: str = "IR"
    population: int = Field(default=88550570, gt=0)
    currency: str = "IRR"
    demonym: str = "Iranian"


class SelectionConfig(BaseModel):
    """Deterministic candidate selection."""

    scope: Literal["document", "global"] = Field(
        default="document",
        description=(
            "Hash (document id, key) or only the key when picking candidates. "
            "With 'document' the same key may resolve differently in different "
            "stories; use 'global' for identical picks across stories"
        ),
    )


class ComparisonConfig(BaseModel):
    """Banding rules for comparable-event phrasing."""

    enabled: bool = True
    inline: bool = False
    approximate_low: float = Field(default=0.85, gt=0.0)
    approximate_high: float = Field(default=1.15, gt=0.0)
    fraction_tolerance: float = Field(default=0.1, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_band(self):
        """Ensure the approximate band is not inverted."""
        if self.approximate_low > 1.0 or self.approximate_high < 1.0:
            raise ValueError("approximate band must contain 1.0")
        return self


class OutputConfig(BaseModel):
    """Configuration for batch output."""

    output_dir: Path = Path("output")
    countries: Optional[list[str]] = None  # None = every country in reference data
    languages: Optional[list[str]] = None  # None = each country's own languages
    stories: Optional[list[str]] = None  # None = every story
    contextualize: bool = True
    save_report: bool = True


class Config(BaseModel):
    """Main configuration for the contextualization pipeline."""

    data: DataConfig = Field(default_factory=DataConfig)
    source: SourceConfig = Field(default_factory=SourceConfig)
    selection: SelectionConfig = Field(default_factory=SelectionConfig)
    comparison: ComparisonConfig = Field(default_factory=ComparisonConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    workers: int = Field(default=1, ge=1)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "Config":
        """Load configuration from a YAML file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, path: str | Path) -> None:
        """Save configuration to a YAML file."""
        data = self.model_dump(mode="json")
        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(data, f, default_flow_style=False, allow_unicode=True)
