import threading
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path

from ewallet_ums.runtime.config.config_data import ConfigData
from ewallet_ums.runtime.config.config_template import (
    DEFAULT_CONFIG_PATH,
    load_templated_yaml,
)
from ewallet_ums.runtime.environment import get_env


@dataclass(frozen=True)
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


_default_lock = threading.Lock()
_default_context: AppContext | None = None

_app_context: ContextVar[AppContext | None] = ContextVar("app_context", default=None)


def _load_default_context() -> AppContext:
    global _default_context
    with _default_lock:
        if _default_context is None:
            config_path = Path(get_env("CONFIG_FILE", str(DEFAULT_CONFIG_PATH)))
            _default_context = AppContext(config=load_templated_yaml(config_path))
        return _default_context


def get_context() -> AppContext:
    """Get the current application context, rendering the template on first use."""
    context = _app_context.get()
    if context is None:
        context = _load_default_context()
    return context


def set_context(context: AppContext) -> Token[AppContext | None]:
    return _app_context.set(context)


def set_config(config: ConfigData) -> None:
    """Replace the configuration of the current context."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config


@contextmanager
def with_context(config_override: ConfigData | None = None):
    """Temporarily run with a different configuration.

    Example:
        with with_context(ConfigData(app=AppConfig(port=9000))):
            assert get_config().app.port == 9000
    """
    if config_override is None:
        yield
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    token = _app_context.set(AppContext(config=config_override))
    try:
        yield
    finally:
        _app_context.reset(token)
