import json
import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from devicecfg.exception import MalformedDocumentError, ShapeMismatchError
from devicecfg.schema.device_schema import DriverConfig
from devicecfg.util.validation_util import classify_validation_error

logger = logging.getLogger(__name__)

_ENV_PATTERN = re.compile(r"\$\{(\w+)(?::-([^\}]*))?\}")  # Match ${VAR_NAME:-default} or ${VAR_NAME}


class ConfigManager:

    @staticmethod
    def load_yaml_file(path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            try:
                return yaml.safe_load(f)
            except (yaml.YAMLError, UnicodeDecodeError) as e:
                raise MalformedDocumentError(f"{path}: invalid YAML: {e}", location=str(path)) from e

    @staticmethod
    def load_json_file(path: str) -> Any:
        with open(path, "r", encoding="utf-8") as f:
            try:
                return json.load(f)
            except (json.JSONDecodeError, UnicodeDecodeError) as e:
                raise MalformedDocumentError(f"{path}: invalid JSON: {e}", location=str(path)) from e

    @staticmethod
    def load_document(path: str) -> Any:
        """Load a YAML or JSON document, chosen by file suffix (YAML unless `.json`)."""
        if Path(path).suffix.lower() == ".json":
            return ConfigManager.load_json_file(path)
        return ConfigManager.load_yaml_file(path)

    @staticmethod
    def parse_env_var_with_default(value: str) -> bool | int | float | str | None:
        match = _ENV_PATTERN.fullmatch(value.strip())
        if not match:
            return value

        var_name = match.group(1)
        default_value = match.group(2)

        resolved_value = os.getenv(var_name) or default_value
        if resolved_value is not None:
            return ConfigManager._parse_value_by_type(resolved_value)
        logger.warning(f"[CONFIG] environment variable {var_name} is not set and has no default")
        return None

    @staticmethod
    def resolve_env_vars(data: Any) -> Any:
        """Recursively substitute `${VAR}` / `${VAR:-default}` string values."""
        if isinstance(data, str):
            return ConfigManager.parse_env_var_with_default(data)
        if isinstance(data, Mapping):
            return {k: ConfigManager.resolve_env_vars(v) for k, v in data.items()}
        if isinstance(data, list):
            return [ConfigManager.resolve_env_vars(v) for v in data]
        return data

    @staticmethod
    def parse_driver_config(raw_config: Any, resolve_env: bool = True) -> DriverConfig:
        """
        Decode an already-loaded document into the device aggregate.

        Raises:
            MalformedDocumentError: the document is not a mapping or has the wrong shape
            ConfigurationRangeError / WidthMismatchError: a field violates a declared bound
        """
        if raw_config is None:
            raw_config = {}
        if not isinstance(raw_config, Mapping):
            raise MalformedDocumentError(
                f"driver config must be a mapping, got {type(raw_config).__name__}", location="<root>"
            )
        if resolve_env:
            raw_config = ConfigManager.resolve_env_vars(raw_config)

        try:
            config = DriverConfig.model_validate(raw_config)
        except ValidationError as e:
            error = classify_validation_error(e)
            if isinstance(error, ShapeMismatchError):
                raise MalformedDocumentError(str(error)) from e
            raise error from e

        logger.info(f"[CONFIG] driver={config.driver!r} loaded with {len(config.devices)} device(s)")
        return config

    @staticmethod
    def load_driver_config(config_path: str, resolve_env: bool = True) -> DriverConfig:
        """Load and decode a driver configuration file"""
        raw_config = ConfigManager.load_document(config_path)
        return ConfigManager.parse_driver_config(raw_config, resolve_env=resolve_env)

    @staticmethod
    def _parse_value_by_type(value: str) -> bool | int | float | str:
        if value.lower() in ["true", "false"]:
            return value.lower() == "true"
        if ConfigManager._is_int(value):
            return int(value)
        if ConfigManager._is_float(value):
            return float(value)
        return value

    @staticmethod
    def _is_int(value: str) -> bool:
        try:
            int(value)
            return True
        except ValueError:
            return False

    @staticmethod
    def _is_float(value: str) -> bool:
        try:
            float(value)
            return True
        except ValueError:
            return False
