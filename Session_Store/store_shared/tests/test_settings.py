import pytest

from Session_Store.logging_config import get_logging_config
from Session_Store.store_shared import config, errors
from Session_Store.store_shared.settings import Settings, settings_from_env, settings_from_mapping


# ── Defaults ──

def test_defaults():
    s = Settings()
    assert s.network == "tcp"
    assert s.address == "127.0.0.1:6379"
    assert s.idle_timeout == 30 * 60
    assert s.max_age_seconds == 31556926
    assert s.prefix == ""


def test_resolve_substitutes_non_positive_values():
    s = Settings(network="", address="", idle_timeout=-5, max_age_seconds=0, socket_timeout=0).resolve()
    assert s.network == config.DEFAULT_NETWORK
    assert s.address == config.DEFAULT_ADDRESS
    assert s.idle_timeout == config.POOL_IDLE_TIMEOUT_SECONDS
    assert s.max_age_seconds == config.SESSION_MAX_AGE_SECONDS
    assert s.socket_timeout == config.REDIS_SOCKET_TIMEOUT


def test_resolve_keeps_configured_timeouts():
    s = Settings(idle_timeout=90, max_age_seconds=3600).resolve()
    assert s.idle_timeout == 90
    assert s.max_age_seconds == 3600


def test_resolve_clamps_negative_limits_to_unbounded():
    s = Settings(max_idle=-1, max_active=-3, wait_timeout=-1).resolve()
    assert s.max_idle == 0
    assert s.max_active == 0
    assert s.wait_timeout == 0.0


def test_resolve_rejects_unknown_network():
    with pytest.raises(errors.ConfigurationError) as exc:
        Settings(network="udp").resolve()
    assert exc.value.key == "network"


def test_settings_are_immutable():
    s = Settings()
    with pytest.raises(AttributeError):
        s.prefix = "other:"


# ── Loaders ──

def test_from_mapping_reads_dotted_keys():
    s = settings_from_mapping({
        "security.session.store.redis.network": "unix",
        "security.session.store.redis.addr": "/tmp/redis.sock",
        "security.session.store.redis.password": "pw",
        "security.session.store.redis.database": "2",
        "security.session.store.redis.prefix": "app:",
        "security.session.store.redis.max_idle": 3,
        "security.session.store.redis.max_active": "12",
        "security.session.store.redis.idle_timeout": "120",
        "security.session.store.redis.max_age": 600,
    })
    assert s.network == "unix"
    assert s.address == "/tmp/redis.sock"
    assert s.password == "pw"
    assert s.database == "2"
    assert s.prefix == "app:"
    assert s.max_idle == 3
    assert s.max_active == 12
    assert s.idle_timeout == 120.0
    assert s.max_age_seconds == 600


def test_from_mapping_defaults_missing_keys():
    s = settings_from_mapping({})
    assert s == Settings()


def test_from_mapping_rejects_bad_int():
    with pytest.raises(errors.ConfigurationError) as exc:
        settings_from_mapping({"security.session.store.redis.max_active": "lots"})
    assert exc.value.key == "security.session.store.redis.max_active"


def test_from_env():
    s = settings_from_env({
        "SESSION_REDIS_ADDR": "redis:6379",
        "SESSION_REDIS_PREFIX": "web:",
        "SESSION_REDIS_MAX_ACTIVE": "4",
        "SESSION_REDIS_MAX_AGE": "",
    })
    assert s.address == "redis:6379"
    assert s.prefix == "web:"
    assert s.max_active == 4
    assert s.max_age_seconds == config.SESSION_MAX_AGE_SECONDS


def test_from_env_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SESSION_REDIS_DATABASE", "5")
    assert settings_from_env().database == "5"


# ── Errors / logging ──

def test_command_error_carries_context():
    e = errors.CommandError("SETEX", "sess:abc", "READONLY")
    assert e.command == "SETEX"
    assert e.key == "sess:abc"
    assert "SETEX sess:abc failed" in str(e)


def test_expired_is_a_decode_error():
    assert issubclass(errors.ExpiredError, errors.DecodeError)
    assert issubclass(errors.NamespaceNotFoundError, errors.CommandError)


def test_logging_config_is_valid():
    cfg = get_logging_config("DEBUG")
    assert cfg["loggers"]["Session_Store"]["level"] == "DEBUG"
    assert cfg["root"]["handlers"] == ["default"]
