"""
Run configuration: schema, loading and validation.

Configuration comes from an optional YAML file, overridden by explicitly
given CLI arguments, and is validated with pydantic. Any failure here is a
run-level precondition failure and raises ConfigurationError.
"""

import logging
from argparse import Namespace
from pathlib import Path
from typing import Any, Dict, List, Optional, Self

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from scrud_generator.constants import DefaultConfig
from scrud_generator.exceptions import ConfigurationError


logger = logging.getLogger(__name__)


# --- Pydantic Models for Configuration Schema ---
class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    models: List[str] = Field(
        default_factory=list,
        description="Metadata files or directories of YAML files with a top-level 'models' list.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Root directory of the generated packages.",
    )
    include_models: Optional[List[str]] = Field(
        default=None,
        description="Optional list of model names (or package.Name) to include.",
    )
    exclude_models: Optional[List[str]] = Field(
        default=None,
        description="Optional list of model names (or package.Name) to exclude.",
    )
    known_types: List[str] = Field(
        default_factory=list,
        description="Qualified names of hand-written types, e.g. declared DTOs.",
    )
    properties: Dict[str, str] = Field(
        default_factory=dict,
        description="Free-form run properties, e.g. naming.repository.suffix.",
    )
    runtime_package: str = Field(
        DefaultConfig.RUNTIME_PACKAGE,
        min_length=1,
        description="Package providing the base classes generated code extends.",
    )
    max_workers: int = Field(
        DefaultConfig.MAX_WORKERS,
        ge=1,
        description="Models processed in parallel; 1 keeps the run single-threaded.",
    )
    report_path: Optional[str] = Field(
        default=None,
        description="Where to save the run report (.yaml/.yml, otherwise Markdown).",
    )

    @field_validator("include_models", "exclude_models", "known_types", "models", mode="before")
    @classmethod
    def check_name_list(cls, v: Optional[List[Any]]) -> Optional[List[str]]:
        """Ensure list items are non-empty strings."""
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("Expected a list of strings.")
        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            stripped_item = item.strip()
            if not stripped_item:
                raise ValueError(
                    f"Item at index {index} cannot be empty or just whitespace."
                )
            processed_list.append(stripped_item)
        return processed_list

    @field_validator("properties", mode="before")
    @classmethod
    def stringify_properties(cls, v: Any) -> Any:
        """YAML turns values like ``true`` or ``10`` into non-strings; properties are strings."""
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): str(value) for key, value in v.items()}
        return v

    @model_validator(mode="after")
    def check_filters(self) -> Self:
        if self.include_models and self.exclude_models:
            overlap = set(self.include_models) & set(self.exclude_models)
            if overlap:
                logger.warning(f"Models both included and excluded will be excluded: {sorted(overlap)}")
        return self

    model_config = ConfigDict(
        extra="ignore",  # Allow and ignore extra fields from input dict
    )


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any], config_file: Optional[str] = None) -> ToolConfigSchema:
    """Validates a raw configuration dictionary against the ToolConfigSchema."""
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug("Configuration dictionary parsed and validated successfully against schema.")
        return validated_config
    except ValidationError as e:
        logger.critical("Configuration validation failed! Please check your config file or arguments.")
        problems = []
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            msg = error.get("msg", "Unknown validation error")
            logger.error(f"  - Location: '{loc_str}': {msg}")
            problems.append(f"{loc_str}: {msg}")
        raise ConfigurationError(
            f"Invalid configuration: {'; '.join(problems)}", config_file=config_file
        ) from e


def load_config(config_path: Optional[str], cli_args: Optional[Namespace] = None) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        config_file = Path(config_path)
        if not config_file.is_file():
            raise ConfigurationError(f"Config file not found at {config_path}", config_file=config_path)
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Error parsing YAML file {config_path}: {e}", config_file=config_path) from e
        except OSError as e:
            raise ConfigurationError(f"Error reading config file {config_path}: {e}", config_file=config_path) from e

        if yaml_config and isinstance(yaml_config, dict):
            raw_config.update(yaml_config)
            logger.debug(f"Loaded configuration from {config_path}")
        elif yaml_config:
            raise ConfigurationError(
                f"Content in config file {config_path} is not a mapping", config_file=config_path
            )

    # 2. Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    if cli_args is not None:
        for key, value in vars(cli_args).items():
            if value is not None and key in ToolConfigSchema.model_fields:
                raw_config[key] = value
                overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    # 3. Validate
    logger.info("Validating final configuration...")
    validated_config = validate_and_parse_config(raw_config, config_file=config_path)

    # 4. Post-validation adjustments
    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())
    # Model paths from the file are relative to it, CLI paths to the working directory
    if config_path and "models" not in overridden_keys:
        base_dir = Path(config_path).resolve().parent
        validated_config.models = [
            str(path if path.is_absolute() else base_dir / path)
            for path in (Path(entry) for entry in validated_config.models)
        ]

    if not validated_config.models:
        raise ConfigurationError(
            "No model metadata configured; set 'models' to metadata files or directories",
            config_file=config_path,
        )

    logger.info("Configuration loaded and validated successfully.")
    return validated_config
