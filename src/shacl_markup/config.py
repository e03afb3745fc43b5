"""
Validator configuration.

A validator is configured from a YAML file such as:

    shapes_path: shapes/schema.ttl
    subclasses_path: shapes/subclasses.ttl
    annotations:
      description: http://www.w3.org/2000/01/rdf-schema#comment
    context:
      "@vocab": "http://schema.org/"

Relative paths are resolved against the directory of the YAML file.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from shacl_markup.errors import ShaclMarkupError

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "SHACL_MARKUP_CONFIG"
DEFAULT_BASE_URL_PREFIX = "https://example.org/"
DEFAULT_BASE_URL_LENGTH = 16


class ConfigValidationError(ShaclMarkupError):
    """Configuration validation error."""
    pass


def load_text(path: Union[str, Path]) -> str:
    """Read a local shapes, hierarchy or data file as UTF-8 text."""
    return Path(path).read_text(encoding="utf-8")


@dataclass
class ValidatorConfig:
    """Everything needed to build a ShaclValidator."""
    shapes_path: str = ""
    subclasses_path: Optional[str] = None
    annotations: Dict[str, str] = field(default_factory=dict)
    context: Dict[str, Any] = field(default_factory=dict)
    base_url_prefix: str = DEFAULT_BASE_URL_PREFIX
    base_url_length: int = DEFAULT_BASE_URL_LENGTH
    
    def to_dict(self) -> Dict[str, Any]:
        return {
            "shapes_path": self.shapes_path,
            "subclasses_path": self.subclasses_path,
            "annotations": dict(self.annotations),
            "context": dict(self.context),
            "base_url_prefix": self.base_url_prefix,
            "base_url_length": self.base_url_length,
        }
    
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ValidatorConfig":
        return cls(
            shapes_path=data.get("shapes_path", ""),
            subclasses_path=data.get("subclasses_path"),
            annotations=dict(data.get("annotations") or {}),
            context=dict(data.get("context") or {}),
            base_url_prefix=data.get("base_url_prefix", DEFAULT_BASE_URL_PREFIX),
            base_url_length=data.get("base_url_length", DEFAULT_BASE_URL_LENGTH),
        )
    
    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "ValidatorConfig":
        """
        Load and validate a YAML configuration file.
        
        Raises:
            ConfigValidationError: If the file is not a mapping or fails validation
        """
        path = Path(path)
        data = yaml.safe_load(load_text(path)) or {}
        if not isinstance(data, dict):
            raise ConfigValidationError(f"Configuration in {path} must be a mapping")
        
        config = cls.from_dict(data)
        root = path.parent
        if config.shapes_path and not Path(config.shapes_path).is_absolute():
            config.shapes_path = str(root / config.shapes_path)
        if config.subclasses_path and not Path(config.subclasses_path).is_absolute():
            config.subclasses_path = str(root / config.subclasses_path)
        
        config.validate()
        logger.info(f"Loaded validator configuration from {path}")
        return config
    
    @classmethod
    def from_env(cls) -> "ValidatorConfig":
        """Load the YAML file named by the SHACL_MARKUP_CONFIG environment variable."""
        path = os.environ.get(CONFIG_ENV_VAR)
        if not path:
            raise ConfigValidationError(f"{CONFIG_ENV_VAR} is not set")
        return cls.from_yaml(path)
    
    def validate(self) -> None:
        """
        Check the configuration.
        
        Raises:
            ConfigValidationError: Listing every problem found
        """
        errors: List[str] = []
        
        if not self.shapes_path:
            errors.append("shapes_path is required")
        elif not Path(self.shapes_path).is_file():
            errors.append(f"shapes file not found: {self.shapes_path}")
        
        if self.subclasses_path and not Path(self.subclasses_path).is_file():
            errors.append(f"subclasses file not found: {self.subclasses_path}")
        
        for name, predicate in self.annotations.items():
            if not isinstance(predicate, str) or not predicate:
                errors.append(f"annotation {name} must map to a predicate IRI")
        
        if not self.base_url_prefix:
            errors.append("base_url_prefix must not be empty")
        
        if not isinstance(self.base_url_length, int) or self.base_url_length < 1:
            errors.append("base_url_length must be a positive integer")
        
        if errors:
            raise ConfigValidationError("; ".join(errors))
