"""Host environment detection and optional YAML application config."""

from __future__ import annotations

import logging
import os
import socket
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

LOGGER = logging.getLogger(__name__)

LOCAL_HOST = "127.0.0.1"
LAN_FALLBACK_HOST = "192.168.178.67"
LAN_HOST_SUFFIX = ".67"

DEFAULT_PORT = 8888
DEFAULT_TIMEOUT_MS = 10000
DEFAULT_LOCK_PATH = "/home/pi/bin/.lockPiGpio"
DEFAULT_WATCHDOG = "/dev/watchdog"

_MODEL_PATH = "/proc/device-tree/model"
_OS_RELEASE_PATH = "/etc/os-release"


def configure_logging(level: str) -> None:
    """Set up basic logging for the entry points."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format="%(asctime)s %(levelname)s %(message)s")


def _read_text(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as handle:
            return handle.read()
    except OSError:
        return ""


def _os_release_name(text: str) -> str:
    for line in text.splitlines():
        if line.startswith("NAME="):
            return line[5:].strip().strip('"').strip("'")
    return ""


def _host_ipv4(host_name: str) -> Optional[str]:
    try:
        address = socket.gethostbyname(host_name)
    except OSError:
        return None
    if address.count(".") != 3:
        return None
    return address


@dataclass(frozen=True)
class HostEnvironment:
    """Facts about the machine this process runs on, detected once."""

    on_pi: bool = False
    host_name: str = ""
    host_ipv4: Optional[str] = None

    @classmethod
    def detect(
        cls,
        *,
        model_path: str = _MODEL_PATH,
        os_release_path: str = _OS_RELEASE_PATH,
    ) -> "HostEnvironment":
        model = _read_text(model_path).strip("\x00 \n")
        os_name = _os_release_name(_read_text(os_release_path))
        on_pi = model.startswith("Raspberry Pi") or os_name.lower().startswith("raspbian")
        host_name = socket.gethostname()
        env = cls(on_pi=on_pi, host_name=host_name, host_ipv4=_host_ipv4(host_name))
        LOGGER.debug("Detected host environment %s", env)
        return env

    def default_host(self) -> str:
        """Daemon host: loopback on a Pi, else ``.67`` in this host's /24."""
        if self.on_pi:
            return LOCAL_HOST
        if not self.host_ipv4:
            return LAN_FALLBACK_HOST
        last_dot = self.host_ipv4.rfind(".")
        if last_dot < 6 or self.host_ipv4.startswith("127."):
            return LAN_FALLBACK_HOST
        return self.host_ipv4[:last_dot] + LAN_HOST_SUFFIX


@dataclass
class BoardConfig:
    type: int = 3
    host: Optional[str] = None
    port: int = DEFAULT_PORT
    timeout_ms: int = DEFAULT_TIMEOUT_MS


@dataclass
class LockConfig:
    enabled: bool = True
    path: str = DEFAULT_LOCK_PATH
    create: bool = False


@dataclass
class WatchdogConfig:
    enabled: bool = False
    device: str = DEFAULT_WATCHDOG
    nowayout_path: Optional[str] = None


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    board: BoardConfig = field(default_factory=BoardConfig)
    lock: LockConfig = field(default_factory=LockConfig)
    watchdog: WatchdogConfig = field(default_factory=WatchdogConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def _int(section: Dict[str, Any], name: str, key: str, default: int) -> int:
    value = section.get(key, default)
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name}.{key} must be an integer, got {value!r}") from exc


def _bool(section: Dict[str, Any], name: str, key: str, default: bool) -> bool:
    value = section.get(key, default)
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{name}.{key} must be true or false, got {value!r}")


def _opt_str(section: Dict[str, Any], key: str, default: Optional[str]) -> Optional[str]:
    value = section.get(key, default)
    if value is None:
        return None
    return str(value)


def parse_config(raw: Optional[Dict[str, Any]]) -> AppConfig:
    """Build an :class:`AppConfig` from an already parsed mapping."""
    if raw is None:
        return AppConfig()
    if not isinstance(raw, dict):
        raise ConfigError("Config root must be a mapping")

    board_raw = _section(raw, "board")
    lock_raw = _section(raw, "lock")
    wdog_raw = _section(raw, "watchdog")
    log_raw = _section(raw, "logging")

    board = BoardConfig(
        type=_int(board_raw, "board", "type", 3),
        host=_opt_str(board_raw, "host", None),
        port=_int(board_raw, "board", "port", DEFAULT_PORT),
        timeout_ms=_int(board_raw, "board", "timeout_ms", DEFAULT_TIMEOUT_MS),
    )
    lock = LockConfig(
        enabled=_bool(lock_raw, "lock", "enabled", True),
        path=str(lock_raw.get("path", DEFAULT_LOCK_PATH)),
        create=_bool(lock_raw, "lock", "create", False),
    )
    watchdog = WatchdogConfig(
        enabled=_bool(wdog_raw, "watchdog", "enabled", False),
        device=str(wdog_raw.get("device", DEFAULT_WATCHDOG)),
        nowayout_path=_opt_str(wdog_raw, "nowayout_path", None),
    )
    level = str(log_raw.get("level", "INFO")).upper()
    if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"logging.level {level!r} is not a logging level")
    return AppConfig(board=board, lock=lock, watchdog=watchdog, logging=LoggingConfig(level=level))


def load_config(path: Optional[str]) -> AppConfig:
    """Load a YAML config file; ``None`` yields the defaults."""
    if path is None:
        return AppConfig()
    if not os.path.exists(path):
        raise ConfigError(f"Config file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as handle:
            raw = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Config file {path} is not valid YAML: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Config file {path} can't be read: {exc}") from exc
    LOGGER.debug("Loaded config from %s", path)
    return parse_config(raw)
