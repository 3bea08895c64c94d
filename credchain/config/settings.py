"""
Configuration system using Pydantic for type-safe settings management.

Settings describe the helper chain and how the resolver falls back to the
user. They load from a YAML file (with ${VAR} interpolation) and from
CREDCHAIN_* environment variables.

Example YAML::

    helpers:
      - cache --timeout=900
      - store --file=${HOME}/.credentials
    url_helpers:
      "https://git.example.com":
        - "!pass-helper"
    interactive: true
    helper_timeout: 30
"""

from __future__ import annotations

import os
import re
from pathlib import Path

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from credchain.credentials.helpers import DEFAULT_HELPER_PREFIX, DEFAULT_SHELL
from credchain.credentials.record import CredentialRecord
from credchain.credentials.url import parse_credential_url
from credchain.exceptions import ConfigurationError, CredentialUrlError


class CredentialSettings(BaseSettings):
    """Credential resolution settings.

    The effective helper chain for a record is ``helpers`` followed by the
    lists of every matching ``url_helpers`` pattern, in declaration order.
    """

    model_config = SettingsConfigDict(
        env_prefix="CREDCHAIN_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    helpers: list[str] = Field(default_factory=list, description="Helper specifiers consulted for every credential")
    url_helpers: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Additional helpers for credentials matching a URL pattern",
    )
    helper_prefix: str = Field(default=DEFAULT_HELPER_PREFIX, description="Prefix prepended to named helpers")
    shell: str = Field(default=DEFAULT_SHELL, description="Shell used to run helpers")
    helper_timeout: float | None = Field(
        default=None,
        gt=0,
        description="Seconds before a helper is killed (None waits indefinitely)",
    )
    interactive: bool = Field(default=True, description="Prompt on the terminal when helpers come up short")
    askpass: str | None = Field(default=None, description="Askpass program used instead of the terminal")
    username: str | None = Field(default=None, description="Username used when the credential names none")
    use_http_path: bool = Field(
        default=True,
        description="Send the path to helpers for http(s) credentials",
    )
    log_level: str = Field(default="WARNING", description="Minimum log level")

    @field_validator("helpers", mode="before")
    @classmethod
    def split_single_helper(cls, v: object) -> object:
        """Accept a single helper string in place of a list."""
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("url_helpers")
    @classmethod
    def validate_url_patterns(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        """Ensure every URL pattern can be decomposed.

        Raises:
            ValueError: If a pattern is not a valid credential URL
        """
        for pattern in v:
            try:
                parse_credential_url(pattern)
            except CredentialUrlError as e:
                raise ValueError(f"Invalid url_helpers pattern: {e.message}") from e
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the log level name."""
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level

    def helpers_for(self, record: CredentialRecord) -> list[str]:
        """Return the helper chain for a record.

        Args:
            record: Record with its context fields set

        Returns:
            Global helpers followed by those of every matching URL pattern
        """
        chain = list(self.helpers)
        for pattern, helpers in self.url_helpers.items():
            if url_pattern_matches(pattern, record):
                chain.extend(helpers)
        return chain

    @classmethod
    def from_yaml(cls, config_path: str) -> CredentialSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            CredentialSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_file) as f:
                yaml_content = f.read()
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        # An empty file means "all defaults"
        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            elif default_value is not None:
                return default_value
            else:
                raise ValueError(f"Environment variable {var_name} is not set")

        def process_line(line: str) -> str:
            if line.lstrip().startswith("#"):
                return line
            return pattern.sub(replace_var, line)

        return "\n".join(process_line(line) for line in content.split("\n"))


def url_pattern_matches(pattern: str, record: CredentialRecord) -> bool:
    """Check whether a URL pattern applies to a record.

    The protocol must be equal. Host and username must be equal when the
    pattern names them; a pattern path must match whole leading segments of
    the record's path.

    Example:
        >>> url_pattern_matches("https://example.com", CredentialRecord(protocol="https", host="example.com"))
        True
    """
    parts = parse_credential_url(pattern)

    if parts["protocol"] != (record.protocol or "").lower():
        return False
    if parts["host"] and parts["host"].lower() != (record.host or "").lower():
        return False
    if parts["username"] and parts["username"] != record.username:
        return False
    if parts["path"] and not _path_within(parts["path"], record.path or ""):
        return False
    return True


def _path_within(prefix: str, path: str) -> bool:
    """Check that path equals prefix or lies below it, at a '/' boundary."""
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(f"{prefix}/")
