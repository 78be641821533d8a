"""rpi_gpiod package: Raspberry Pi GPIO control through the pigpiod socket daemon."""

__all__ = [
    "blink",
    "board",
    "cli",
    "client",
    "config",
    "cycle",
    "errors",
    "lockfile",
    "output_claims",
    "pinmap",
    "protocol",
    "session",
    "status",
    "watchdog",
]
