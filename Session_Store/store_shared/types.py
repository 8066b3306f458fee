from dataclasses import dataclass


@dataclass
class PoolStats:
    active:     int
    idle:       int
    max_active: int
    max_idle:   int
    dialed:     int
    closed:     int


@dataclass
class HealthStatus:
    connected: bool
    reachable: bool
    pool:      PoolStats | None


@dataclass
class SweepResult:
    scanned: int = 0
    deleted: int = 0
    failed:  int = 0
    skipped: int = 0
