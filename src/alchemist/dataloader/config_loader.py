# src/alchemist/dataloader/config_loader.py
from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from alchemist.errors import ConfigError
from alchemist.schemas.models import Config, EntityType

_SOURCE_KEYS: dict[EntityType, str] = {
    EntityType.CLIENT: "clients_csv",
    EntityType.WORKER: "workers_csv",
    EntityType.TASK: "tasks_csv",
}


class ConfigLoader:
    """
    @brief
    Loader responsible for reading and validating runtime configuration.

    @details
    Reads YAML from disk, checks that the root is a mapping, validates it
    against the pydantic `Config` schema and raises `ConfigError` for every
    failure mode. Relative input paths are resolved against the directory
    holding the configuration file.
    """

    def load(self, path: Path) -> Config:
        """
        @brief
        Load and validate configuration from a YAML file.

        @raises
            ConfigError
                Raised if the file is missing, malformed, or fails schema validation.
        """
        data = self._read_yaml(path)
        return self._validate(data)

    def input_paths(self, cfg: Config, base_dir: Path) -> dict[EntityType, Path]:
        """
        @brief
        Resolve the configured CSV inputs for each entity type.

        @raises
            ConfigError
                Raised if any of clients_csv, workers_csv, tasks_csv is unset.
        """
        missing = [key for key in _SOURCE_KEYS.values() if not getattr(cfg, key)]
        if missing:
            raise ConfigError(
                message=f"Missing input path(s) in configuration: {', '.join(missing)}",
                source="ConfigLoader.input_paths",
                suggested_action="Set clients_csv, workers_csv and tasks_csv in config.yaml.",
            )

        paths: dict[EntityType, Path] = {}
        for entity, key in _SOURCE_KEYS.items():
            p = Path(getattr(cfg, key))
            paths[entity] = p if p.is_absolute() else base_dir / p
        return paths

    def _read_yaml(self, path: Path) -> dict[str, Any]:
        # (1) Path type, existence, extension
        if not isinstance(path, Path):
            raise ConfigError(
                message=f"Invalid path type: expected pathlib.Path, got {type(path).__name__}",
                source="ConfigLoader._read_yaml",
                suggested_action="Pass a pathlib.Path object pointing to config.yaml.",
            )

        if not path.exists():
            raise ConfigError(
                message=f"Configuration file not found: {path}",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure config.yaml exists and the path is correct.",
            )

        if path.suffix.lower() not in {".yaml", ".yml"}:
            raise ConfigError(
                message=f"Invalid configuration file extension: {path.suffix}",
                source="ConfigLoader._read_yaml",
                suggested_action="Use .yaml or .yml extension for configuration files.",
            )

        # (2) Parse
        try:
            with path.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(
                message=f"YAML parsing failed: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Fix YAML syntax/indentation.",
            ) from e
        except OSError as e:
            raise ConfigError(
                message=f"Unable to read configuration file: {e}",
                source="ConfigLoader._read_yaml",
                suggested_action="Check file permissions and path accessibility.",
            ) from e

        # (3) Structure
        if data is None:
            raise ConfigError(
                message="Configuration file is empty.",
                source="ConfigLoader._read_yaml",
                suggested_action="Populate config.yaml with input paths and validation settings.",
            )

        if not isinstance(data, Mapping):
            raise ConfigError(
                message="Configuration root must be a mapping (key: value pairs).",
                source="ConfigLoader._read_yaml",
                suggested_action="Ensure top-level YAML structure uses key: value mappings.",
            )

        return dict(data)

    def _validate(self, data: dict[str, Any]) -> Config:
        try:
            return Config(**data)
        except ValidationError as e:
            raise ConfigError(
                message=f"Invalid configuration structure: {e}",
                source="ConfigLoader._validate",
                suggested_action=(
                    "Check field names, types, and bounds in config.yaml. "
                    "Remove unknown keys (extra fields are forbidden)."
                ),
            ) from e


__all__ = ["ConfigLoader"]
