"""Configuration classes for biom conversion.

This module provides the options controlling how biom metadata is
normalized and a small YAML loader for keeping them in a project file.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Union

import yaml  # type: ignore


class FacetAlignment(Enum):
    """Enumeration of strategies for aligning per-identifier metadata
    records into a rectangular table."""

    BY_NAME = "by_name"
    # Legacy behaviour: pad records with trailing nulls, place by position
    POSITIONAL = "positional"


@dataclass
class ConversionConfig:
    """Configuration for converting a biom table into a FeatureExperiment."""

    remove_taxa_prefixes: bool = False
    alignment: FacetAlignment = FacetAlignment.BY_NAME
    sample_id_column: str = "sample"
    feature_id_column: str = "feature"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not isinstance(self.alignment, FacetAlignment):
            if isinstance(self.alignment, str):
                self.alignment = FacetAlignment(self.alignment)
            else:
                raise ValueError(
                    f"Invalid facet alignment: {self.alignment}"
                )

        if not isinstance(self.remove_taxa_prefixes, bool):
            raise ValueError(
                "remove_taxa_prefixes must be a boolean, got "
                f"{self.remove_taxa_prefixes!r}"
            )

        if self.sample_id_column == self.feature_id_column:
            raise ValueError(
                "sample_id_column and feature_id_column must differ"
            )

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "ConversionConfig":
        """Build a ConversionConfig from a YAML file.

        Options are read from a ``conversion`` section when present,
        otherwise from the top level of the file.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            ConversionConfig populated from the file
        """
        config = Config(config_path)
        data = config.get("conversion")
        if not isinstance(data, dict):
            data = config.to_dict()
        known = {key: data[key] for key in cls.__dataclass_fields__ if key in data}
        return cls(**known)


class Config:
    """Configuration class that loads a YAML mapping from disk."""

    def __init__(self, config_path: Union[str, Path]):
        """Initialize configuration from YAML file.

        Args:
            config_path: Path to YAML configuration file

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file does not hold a mapping
        """
        self.config_path = Path(config_path)
        if not self.config_path.exists():
            raise FileNotFoundError(
                f"Configuration file not found: {config_path}"
            )

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(
                f"Configuration file must hold a mapping: {config_path}"
            )
        self._data: Dict[str, Any] = data

    def get(self, key: str, default: Any = None) -> Any:
        """Get a top-level configuration value with optional default."""
        return self._data.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert config back to dictionary."""
        return self._data.copy()
