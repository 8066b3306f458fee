# Redis Connection

DEFAULT_NETWORK             = "tcp"
DEFAULT_ADDRESS             = "127.0.0.1:6379"
DEFAULT_PASSWORD            = ""         # empty -> no AUTH
DEFAULT_DATABASE            = ""         # empty -> no SELECT
REDIS_SOCKET_TIMEOUT        = 5.0        # seconds, per round trip

# Connection Pool

POOL_MAX_IDLE               = 10         # 0 -> no limit
POOL_MAX_ACTIVE             = 30         # 0 -> no limit
POOL_IDLE_TIMEOUT_SECONDS   = 30 * 60    # 30 minutes
POOL_WAIT_TIMEOUT_SECONDS   = 5.0        # 0 -> fail fast when exhausted
POOL_TEST_ON_BORROW_SECONDS = 0.0        # 0 -> probe on every reuse
PING_REPLY                  = "PONG"

# Session Records

DEFAULT_PREFIX              = ""
SESSION_MAX_AGE_SECONDS     = 31_556_926     # 1 year (SETEX)
SESSION_NAMESPACE           = "session"      # hash swept by the cleanup

# Configuration Keys

CONFIG_KEY_ROOT             = "security.session.store.redis"

CONFIG_KEYS = {
    "network":         f"{CONFIG_KEY_ROOT}.network",
    "address":         f"{CONFIG_KEY_ROOT}.addr",
    "password":        f"{CONFIG_KEY_ROOT}.password",
    "database":        f"{CONFIG_KEY_ROOT}.database",
    "prefix":          f"{CONFIG_KEY_ROOT}.prefix",
    "max_idle":        f"{CONFIG_KEY_ROOT}.max_idle",
    "max_active":      f"{CONFIG_KEY_ROOT}.max_active",
    "idle_timeout":    f"{CONFIG_KEY_ROOT}.idle_timeout",
    "max_age_seconds": f"{CONFIG_KEY_ROOT}.max_age",
}

ENV_KEYS = {
    "network":         "SESSION_REDIS_NETWORK",
    "address":         "SESSION_REDIS_ADDR",
    "password":        "SESSION_REDIS_PASSWORD",
    "database":        "SESSION_REDIS_DATABASE",
    "prefix":          "SESSION_REDIS_PREFIX",
    "max_idle":        "SESSION_REDIS_MAX_IDLE",
    "max_active":      "SESSION_REDIS_MAX_ACTIVE",
    "idle_timeout":    "SESSION_REDIS_IDLE_TIMEOUT",
    "max_age_seconds": "SESSION_REDIS_MAX_AGE",
}

# Valid Enums (for validation)

VALID_NETWORKS              = {"tcp", "unix"}
