"""Session store settings and the loaders that build them.

Settings are immutable once built. The store calls ``resolve()`` once at
``init`` so every empty or non-positive field falls back to its default, and
the pool keeps its own runtime counters separately.
"""

import os
from dataclasses import dataclass, replace
from typing import Any, Mapping

from Session_Store.store_shared import config, errors


@dataclass(frozen=True)
class Settings:
    network: str = config.DEFAULT_NETWORK
    address: str = config.DEFAULT_ADDRESS
    password: str = config.DEFAULT_PASSWORD
    database: str = config.DEFAULT_DATABASE
    max_idle: int = config.POOL_MAX_IDLE
    max_active: int = config.POOL_MAX_ACTIVE
    idle_timeout: float = config.POOL_IDLE_TIMEOUT_SECONDS
    prefix: str = config.DEFAULT_PREFIX
    max_age_seconds: int = config.SESSION_MAX_AGE_SECONDS
    socket_timeout: float = config.REDIS_SOCKET_TIMEOUT
    wait_timeout: float = config.POOL_WAIT_TIMEOUT_SECONDS
    test_on_borrow_interval: float = config.POOL_TEST_ON_BORROW_SECONDS

    def resolve(self) -> "Settings":
        """Return a copy with defaults substituted for empty or non-positive values."""
        network = (self.network or config.DEFAULT_NETWORK).lower()
        if network not in config.VALID_NETWORKS:
            raise errors.ConfigurationError("network", self.network)

        return replace(
            self,
            network=network,
            address=self.address or config.DEFAULT_ADDRESS,
            password=self.password or "",
            database=str(self.database or ""),
            prefix=self.prefix or "",
            max_idle=max(self.max_idle, 0),
            max_active=max(self.max_active, 0),
            idle_timeout=self.idle_timeout if self.idle_timeout > 0 else config.POOL_IDLE_TIMEOUT_SECONDS,
            max_age_seconds=self.max_age_seconds if self.max_age_seconds > 0 else config.SESSION_MAX_AGE_SECONDS,
            socket_timeout=self.socket_timeout if self.socket_timeout > 0 else config.REDIS_SOCKET_TIMEOUT,
            wait_timeout=max(self.wait_timeout, 0.0),
            test_on_borrow_interval=max(self.test_on_borrow_interval, 0.0),
        )


def _to_int(name: str, value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError):
        raise errors.ConfigurationError(name, value)


def _to_float(name: str, value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        raise errors.ConfigurationError(name, value)


def _build(lookup: Mapping[str, Any], keys: dict[str, str]) -> Settings:
    def text(field: str, default: str) -> str:
        value = lookup.get(keys[field])
        return default if value is None else str(value)

    return Settings(
        network=text("network", config.DEFAULT_NETWORK),
        address=text("address", config.DEFAULT_ADDRESS),
        password=text("password", config.DEFAULT_PASSWORD),
        database=text("database", config.DEFAULT_DATABASE),
        prefix=text("prefix", config.DEFAULT_PREFIX),
        max_idle=_to_int(keys["max_idle"], lookup.get(keys["max_idle"]), config.POOL_MAX_IDLE),
        max_active=_to_int(keys["max_active"], lookup.get(keys["max_active"]), config.POOL_MAX_ACTIVE),
        idle_timeout=_to_float(
            keys["idle_timeout"], lookup.get(keys["idle_timeout"]), config.POOL_IDLE_TIMEOUT_SECONDS
        ),
        max_age_seconds=_to_int(
            keys["max_age_seconds"], lookup.get(keys["max_age_seconds"]), config.SESSION_MAX_AGE_SECONDS
        ),
    )


def settings_from_mapping(values: Mapping[str, Any]) -> Settings:
    """Build settings from ``security.session.store.redis.*`` keys."""
    return _build(values, config.CONFIG_KEYS)


def settings_from_env(environ: Mapping[str, str] | None = None) -> Settings:
    """Build settings from ``SESSION_REDIS_*`` environment variables."""
    return _build(os.environ if environ is None else environ, config.ENV_KEYS)
