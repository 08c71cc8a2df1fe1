"""Configuration management for BCalc front ends."""

import os
from dataclasses import dataclass, fields
from typing import Any, Dict

import yaml

from bcalc.bcalc_error import BCalcError


class BCalcConfigError(BCalcError):
    """Configuration file is missing, malformed, or has invalid values."""


@dataclass
class BCalcConfig:
    """Settings shared by the REPL, the file runner and the CLI."""

    max_depth: int = 100
    chunk_size: int = 5000
    log_level: str = "WARNING"
    prompt: str = "> "

    @classmethod
    def load_from_file(cls, config_path: str) -> 'BCalcConfig':
        """Load configuration from YAML file."""
        if not os.path.exists(config_path):
            raise BCalcConfigError(
                message=f"Configuration file not found: {config_path}",
                suggestion="Check the path passed with --config"
            )

        with open(config_path, 'r', encoding='utf-8') as f:
            try:
                data = yaml.safe_load(f)

            except yaml.YAMLError as e:
                raise BCalcConfigError(
                    message=f"Configuration file is not valid YAML: {config_path}",
                    context=str(e)
                ) from e

        if data is None:
            return cls()

        if not isinstance(data, dict):
            raise BCalcConfigError(
                message=f"Configuration file must contain a mapping: {config_path}",
                received=type(data).__name__,
                example="max_depth: 500"
            )

        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BCalcConfig':
        """Build a configuration from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise BCalcConfigError(
                message=f"Unknown configuration keys: {', '.join(unknown)}",
                expected=", ".join(sorted(known))
            )

        config = cls(**data)
        config.validate()
        return config

    def validate(self) -> None:
        """Check that every setting has a usable value."""
        for name in ("max_depth", "chunk_size"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise BCalcConfigError(
                    message=f"Configuration value '{name}' must be a positive integer",
                    received=repr(value)
                )

        if str(self.log_level).upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise BCalcConfigError(
                message=f"Unknown log level: {self.log_level}",
                expected="DEBUG, INFO, WARNING, ERROR or CRITICAL"
            )

        self.log_level = str(self.log_level).upper()

    def save_to_file(self, config_path: str) -> None:
        """Save configuration to YAML file."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
