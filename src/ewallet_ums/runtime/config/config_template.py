"""Configuration template substitution utilities."""

import re
from pathlib import Path

import yaml
from loguru import logger
from pydantic import ValidationError

from ewallet_ums.core.errors import ConfigurationError
from ewallet_ums.runtime.config.config_data import ConfigData
from ewallet_ums.runtime.environment import get_env, get_required_env

_PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")

DEFAULT_CONFIG_PATH = Path(__file__).with_name("config.yaml")


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises ConfigurationError if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return get_env(var_name.strip(), default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = get_env(var_name.strip())
            if not value:
                raise ConfigurationError(
                    f"required environment variable {var_name.strip()}: {error_msg}"
                )
            return value

        return get_required_env(var_expr.strip())

    return _PLACEHOLDER.sub(replacer, text)


def load_templated_yaml(file_path: Path = DEFAULT_CONFIG_PATH) -> ConfigData:
    """
    Load a YAML file with environment variable substitution.

    Args:
        file_path: Path to the YAML template

    Returns:
        Validated configuration

    Raises:
        ConfigurationError: If the file is missing, malformed, references an
            unset required variable or fails validation
    """
    try:
        content = Path(file_path).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigurationError(f"configuration file {file_path} not found") from e

    logger.debug("Rendering configuration template {}", file_path)
    substituted_content = substitute_env_vars(content)

    try:
        loaded = yaml.safe_load(substituted_content) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"error parsing YAML: {e}") from e

    try:
        return ConfigData.model_validate(loaded.get("config") or {})
    except ValidationError as e:
        raise ConfigurationError(f"invalid configuration: {e}") from e
