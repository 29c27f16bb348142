"""Configuration validation utilities."""

from dataclasses import dataclass
from typing import Any

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MAX_GRACE_MINUTES = 60


@dataclass(frozen=True)
class ValidationError:
    """Represents a configuration validation error."""
    field: str
    message: str
    value: Any


class ConfigValidator:
    """Validates configuration parameters."""

    @staticmethod
    def validate_evaluation_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate hysteresis parameters."""
        errors = []

        if "grace_minutes" in params:
            value = params["grace_minutes"]
            # bool is an int subclass
            if (not isinstance(value, int) or isinstance(value, bool)
                    or value < 1 or value > MAX_GRACE_MINUTES):
                errors.append(ValidationError(
                    field="grace_minutes",
                    message=f"Must be an integer between 1 and {MAX_GRACE_MINUTES}",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_output_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate monitoring output parameters."""
        errors = []

        if "zabbix_host" in params:
            value = params["zabbix_host"]
            if not isinstance(value, str) or not value.strip() or any(c.isspace() for c in value):
                errors.append(ValidationError(
                    field="zabbix_host",
                    message="Must be a non-empty string without whitespace",
                    value=value
                ))

        if "per_minute_files" in params:
            value = params["per_minute_files"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="per_minute_files",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_logging_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate logging parameters."""
        errors = []

        if "level" in params:
            value = params["level"]
            if not isinstance(value, str) or value.upper() not in LOG_LEVELS:
                errors.append(ValidationError(
                    field="level",
                    message=f"Must be one of {', '.join(LOG_LEVELS)}",
                    value=value
                ))

        if "format_json" in params:
            value = params["format_json"]
            if not isinstance(value, bool):
                errors.append(ValidationError(
                    field="format_json",
                    message="Must be a boolean",
                    value=value
                ))

        return errors

    @staticmethod
    def validate_path_params(params: dict[str, Any]) -> list[ValidationError]:
        """Validate that configured paths are strings."""
        errors = []

        for name in ("aggregated", "state_file", "output", "fallback_definitions"):
            if name in params:
                value = params[name]
                if not isinstance(value, str) or not value.strip():
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a non-empty path string",
                        value=value
                    ))

        for name in ("markets", "definitions", "log_file"):
            if name in params:
                value = params[name]
                if value is not None and not isinstance(value, str):
                    errors.append(ValidationError(
                        field=name,
                        message="Must be a path string or null",
                        value=value
                    ))

        return errors

    @staticmethod
    def validate_config(config: dict[str, Any]) -> list[ValidationError]:
        """Validate complete configuration."""
        errors = []

        for section in ("evaluation", "paths", "output", "logging"):
            if section in config and not isinstance(config[section], dict):
                errors.append(ValidationError(
                    field=section,
                    message="Must be a mapping",
                    value=config[section]
                ))

        if isinstance(config.get("evaluation"), dict):
            errors.extend(ConfigValidator.validate_evaluation_params(config["evaluation"]))

        if isinstance(config.get("paths"), dict):
            errors.extend(ConfigValidator.validate_path_params(config["paths"]))

        if isinstance(config.get("output"), dict):
            errors.extend(ConfigValidator.validate_output_params(config["output"]))

        if isinstance(config.get("logging"), dict):
            errors.extend(ConfigValidator.validate_logging_params(config["logging"]))

        return errors
