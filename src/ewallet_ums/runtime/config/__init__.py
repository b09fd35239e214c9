from .config_data import AppConfig, ConfigData, DatabaseConfig, LoggingConfig
from .config_template import DEFAULT_CONFIG_PATH, load_templated_yaml

__all__ = [
    "AppConfig",
    "ConfigData",
    "DatabaseConfig",
    "LoggingConfig",
    "DEFAULT_CONFIG_PATH",
    "load_templated_yaml",
]
