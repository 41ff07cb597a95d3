"""Client configuration for pymist."""

from __future__ import annotations

import dataclasses
import os
from collections.abc import Callable
from typing import Any

from pymist._constants import (
    DEFAULT_API_PATH,
    DEFAULT_BASE_URL,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_QUERY_TIMEOUT,
    DEFAULT_UPDATE_TIMEOUT,
)
from pymist.exceptions import MistConfigError


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


@dataclasses.dataclass(frozen=True)
class MistConfig:
    """Client configuration.

    Parameters
    ----------
    base_url : str
        Scheme, host and port of the server's control interface.
    api_path : str
        Path of the single JSON command endpoint.
    query_timeout : float
        Seconds before an ordinary command times out.
    update_timeout : float
        Seconds before the slow ``update`` command times out.
    poll_interval : float
        Seconds between background state syncs.
    max_retries : int
        Retries of the aggregate sync call on connection failures.
    retry_backoff_step : float
        Delay before retry *k* is ``k * retry_backoff_step`` seconds.
    api_trace_enabled : bool
        Log every request body and response at DEBUG level.
    """

    base_url: str = DEFAULT_BASE_URL
    api_path: str = DEFAULT_API_PATH
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    update_timeout: float = DEFAULT_UPDATE_TIMEOUT
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_retries: int = 3
    retry_backoff_step: float = 2.0
    api_trace_enabled: bool = False

    def __post_init__(self) -> None:
        if self.query_timeout <= 0 or self.update_timeout <= 0:
            raise MistConfigError("timeouts must be positive")
        if self.poll_interval <= 0:
            raise MistConfigError("poll_interval must be positive")
        if self.max_retries < 0:
            raise MistConfigError("max_retries must not be negative")
        if self.retry_backoff_step < 0:
            raise MistConfigError("retry_backoff_step must not be negative")

    @property
    def api_url(self) -> str:
        path = self.api_path if self.api_path.startswith("/") else f"/{self.api_path}"
        return f"{self.base_url.rstrip('/')}{path}"

    @classmethod
    def from_env(cls, **overrides: Any) -> MistConfig:
        """Create configuration from ``MIST_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ

        _ENV_CONFIG_MAP: dict[str, tuple[str, Callable[[str], Any]]] = {
            "MIST_BASE_URL": ("base_url", str),
            "MIST_API_PATH": ("api_path", str),
            "MIST_QUERY_TIMEOUT": ("query_timeout", float),
            "MIST_UPDATE_TIMEOUT": ("update_timeout", float),
            "MIST_POLL_INTERVAL": ("poll_interval", float),
            "MIST_MAX_RETRIES": ("max_retries", int),
            "MIST_RETRY_BACKOFF_STEP": ("retry_backoff_step", float),
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, (field_name, convert) in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = convert(val)
            except ValueError as exc:
                raise MistConfigError(f"{env_key} has invalid value {val!r}") from exc

        if "api_trace_enabled" not in overrides:
            config_kwargs["api_trace_enabled"] = _env_bool(
                env.get("MIST_API_TRACE_ENABLED"),
                False,
            )

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
