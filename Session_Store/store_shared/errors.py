class SessionStoreError(Exception):
    pass


class ConfigurationError(SessionStoreError):
    def __init__(self, key, value):
        self.key = key
        self.value = value
        message = f"Invalid value {value!r} for {key}"
        super().__init__(message)


class DialError(SessionStoreError):
    def __init__(self, address, cause):
        self.address = address
        self.cause = cause
        message = f"Cannot dial Redis at {address}: {cause}"
        super().__init__(message)


class ConnectionError(SessionStoreError):
    def __init__(self, address, cause):
        self.address = address
        self.cause = cause
        message = f"Redis connection error on connect to {address}: {cause}"
        super().__init__(message)


class PoolExhaustedError(SessionStoreError):
    def __init__(self, max_active, waited):
        self.max_active = max_active
        self.waited = waited
        message = f"Connection pool exhausted: {max_active} active, waited {waited:.2f}s"
        super().__init__(message)


class PoolClosedError(SessionStoreError):
    def __init__(self):
        super().__init__("Connection pool is closed")


class CommandError(SessionStoreError):
    def __init__(self, command, key, cause):
        self.command = command
        self.key = key
        self.cause = cause
        target = f"{command} {key}" if key else command
        message = f"{target} failed: {cause}"
        super().__init__(message)


class NamespaceNotFoundError(CommandError):
    def __init__(self, key):
        super().__init__("HGETALL", key, f"key '{key}' not found")


class DecodeError(SessionStoreError):
    def __init__(self, session_id, reason):
        self.session_id = session_id
        self.reason = reason
        message = f"Cannot decode session {session_id}: {reason}"
        super().__init__(message)


class ExpiredError(DecodeError):
    def __init__(self, session_id):
        super().__init__(session_id, "session timestamp is expired")
