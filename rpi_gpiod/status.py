"""Status codes returned by the GPIO daemon.

The daemon numbers its errors -1..-144 without gaps, so the table below is
indexed by the negated status. Two codes outside that range are produced on
the client side.
"""

from __future__ import annotations

from typing import Tuple

OK = 0
INIT_FAILED = -1
BAD_USER_GPIO = -2
BAD_GPIO = -3
BAD_MODE = -4
BAD_LEVEL = -5
BAD_PUD = -6
BAD_PULSEWIDTH = -7
BAD_DUTYCYCLE = -8
NOT_PERMITTED = -41
GPIO_IN_USE = -50
SOCK_READ_FAILED = -59
SOCK_WRIT_FAILED = -60
UNKNOWN_COMMAND = -88
BAD_PAD = -126
BAD_STRENGTH = -127
CMD_INTERRUPTED = -144
SOCK_READ_LEN = -3059
CMD_BAD = -3081

_STATUS: Tuple[Tuple[str, str], ...] = (
    ("NO_ERROR", "no error"),
    ("INIT_FAILED", "pigpio initialisation failed"),
    ("BAD_USER_GPIO", "GPIO not 0..31"),
    ("BAD_GPIO", "GPIO not 0..53"),
    ("BAD_MODE", "mode not 0..7"),
    ("BAD_LEVEL", "level not 0 or 1"),
    ("BAD_PUD", "pud not 0..2"),
    ("BAD_PULSEWIDTH", "pulsewidth not 0 or 500..2500"),
    ("BAD_DUTYCYCLE", "dutycycle not in range (default 0..255)"),
    ("BAD_TIMER", "timer not 0..9"),
    ("BAD_MS", "ms not 10..60000"),  # -10
    ("BAD_TIMETYPE", "timetype not 0 or 1"),
    ("BAD_SECONDS", "seconds < 0"),
    ("BAD_MICROS", "micros not 0..999999"),
    ("TIMER_FAILED", "gpioSetTimerFunc failed"),
    ("BAD_WDOG_TIMEOUT", "timeout not 0..60000"),
    ("NO_ALERT_FUNC", "deprecated"),
    ("BAD_CLK_PERIPH", "clock peripheral not 0 or 1"),
    ("BAD_CLK_SOURCE", "deprecated"),
    ("BAD_CLK_MICROS", "clock micros not 1, 2, 4, 5, 8 or 10"),
    ("BAD_BUF_MILLIS", "buf millis not 100..10000"),  # -20
    ("BAD_DUTYRANGE", "dutycycle range not 25..40000"),
    ("BAD_SIGNUM", "signum not 0..63"),
    ("BAD_PATHNAME", "can't open pathname"),
    ("NO_HANDLE", "no handle available"),
    ("BAD_HANDLE", "unknown handle"),
    ("BAD_IF_FLAGS", "ifFlags > 3"),
    ("BAD_CHANNEL", "DMA channel not 0..14"),
    ("BAD_SOCKET_PORT", "socket port not 1024..30000"),
    ("BAD_FIFO_COMMAND", "unknown fifo command"),
    ("BAD_SECO_CHANNEL", "DMA secondary channel not 0..14"),  # -30
    ("NOT_INITIALISED", "function called before gpioInitialise"),
    ("INITIALISED", "function called after gpioInitialise"),
    ("BAD_WAVE_MODE", "waveform mode not 0..3"),
    ("BAD_CFG_INTERNAL", "bad parameter in gpioCfgInternals call"),
    ("BAD_WAVE_BAUD", "baud rate not 50-250000(RX)/1000000(TX)"),
    ("TOO_MANY_PULSES", "waveform has too many pulses"),
    ("TOO_MANY_CHARS", "waveform has too many chars"),
    ("NOT_SERIAL_GPIO", "no bit bang serial read in progress on GPIO"),
    ("BAD_SERIAL_STRUC", "bad (null) serial structure parameter"),
    ("BAD_SERIAL_BUF", "bad (null) serial buf parameter"),  # -40
    ("NOT_PERMITTED", "GPIO operation not permitted"),
    ("SOME_PERMITTED", "one or more GPIO not permitted"),
    ("BAD_WVSC_COMMND", "bad WVSC subcommand"),
    ("BAD_WVSM_COMMND", "bad WVSM subcommand"),
    ("BAD_WVSP_COMMND", "bad WVSP subcommand"),
    ("BAD_PULSELEN", "trigger pulse length not 1..100"),
    ("BAD_SCRIPT", "invalid script"),
    ("BAD_SCRIPT_ID", "unknown script id"),
    ("BAD_SER_OFFSET", "add serial data offset > 30 min"),
    ("GPIO_IN_USE", "GPIO already in use"),  # -50
    ("BAD_SERIAL_COUNT", "must read at least a byte at a time"),
    ("BAD_PARAM_NUM", "script parameter id not 0..9"),
    ("DUP_TAG", "script has duplicate tag"),
    ("TOO_MANY_TAGS", "script has too many tags"),
    ("BAD_SCRIPT_CMD", "illegal script command"),
    ("BAD_VAR_NUM", "script variable id not 0..149"),
    ("NO_SCRIPT_ROOM", "no more room for scripts"),
    ("NO_MEMORY", "can't allocate temporary memory"),
    ("SOCK_READ_FAILED", "socket read failed"),
    ("SOCK_WRIT_FAILED", "socket write failed"),  # -60
    ("TOO_MANY_PARAM", "too many script parameters (> 10)"),
    ("SCRIPT_NOT_READY", "script initialising"),
    ("BAD_TAG", "script has unresolved tag"),
    ("BAD_MICS_DELAY", "bad MICS delay (too large)"),
    ("BAD_MILS_DELAY", "bad MILS delay (too large)"),
    ("BAD_WAVE_ID", "non existent wave id"),
    ("TOO_MANY_CBS", "No more CBs for waveform"),
    ("TOO_MANY_OOL", "No more OOL for waveform"),
    ("EMPTY_WAVEFORM", "attempt to create an empty waveform"),
    ("NO_WAVEFORM_ID", "No more waveform ids"),  # -70
    ("I2C_OPEN_FAILED", "can't open I2C device"),
    ("SER_OPEN_FAILED", "can't open serial device"),
    ("SPI_OPEN_FAILED", "can't open SPI device"),
    ("BAD_I2C_BUS", "bad I2C bus"),
    ("BAD_I2C_ADDR", "bad I2C address"),
    ("BAD_SPI_CHANNEL", "bad SPI channel"),
    ("BAD_FLAGS", "bad i2c/spi/ser open flags"),
    ("BAD_SPI_SPEED", "bad SPI speed"),
    ("BAD_SER_DEVICE", "bad serial device name"),
    ("BAD_SER_SPEED", "bad serial baud rate"),  # -80
    ("BAD_PARAM", "bad i2c/spi/ser parameter"),
    ("I2C_WRITE_FAILED", "I2C write failed"),
    ("I2C_READ_FAILED", "I2C read failed"),
    ("BAD_SPI_COUNT", "bad SPI count"),
    ("SER_WRITE_FAILED", "ser write failed"),
    ("SER_READ_FAILED", "ser read failed"),
    ("SER_READ_NO_DATA", "ser read no data available"),
    ("UNKNOWN_COMMAND", "unknown command"),
    ("SPI_XFER_FAILED", "SPI xfer/read/write failed"),
    ("BAD_POINTER", "bad (NULL) pointer"),  # -90
    ("NO_AUX_SPI", "no auxiliary SPI on Pi A or B"),
    ("NOT_PWM_GPIO", "GPIO is not in use for PWM"),
    ("NOT_SERVO_GPIO", "GPIO is not in use for servo pulses"),
    ("NOT_HCLK_GPIO", "GPIO has no hardware clock"),
    ("NOT_HPWM_GPIO", "GPIO has no hardware PWM"),
    ("BAD_HPWM_FREQ", "hardware PWM frequency not 1..125M"),
    ("BAD_HPWM_DUTY", "hardware PWM dutycycle not 0..1M"),
    ("BAD_HCLK_FREQ", "hardware clock frequency not 4689..250M"),
    ("BAD_HCLK_PASS", "need password to use hardware clock 1"),
    ("HPWM_ILLEGAL", "illegal, PWM in use for main clock"),  # -100
    ("BAD_DATABITS", "serial data bits not 1..32"),
    ("BAD_STOPBITS", "serial (half) stop bits not 2..8"),
    ("MSG_TOOBIG", "socket/pipe message too big"),
    ("BAD_MALLOC_MODE", "bad memory allocation mode"),
    ("TOO_MANY_SEGS", "too many I2C transaction segments"),
    ("BAD_I2C_SEG", "an I2C transaction segment failed"),
    ("BAD_SMBUS_CMD", "SMBus command not supported"),
    ("NOT_I2C_GPIO", "no bit bang I2C in progress on GPIO"),
    ("BAD_I2C_WLEN", "bad I2C write length"),
    ("BAD_I2C_RLEN", "bad I2C read length"),  # -110
    ("BAD_I2C_CMD", "bad I2C command"),
    ("BAD_I2C_BAUD", "bad I2C baud rate, not 50-500k"),
    ("CHAIN_LOOP_CNT", "bad chain loop count"),
    ("BAD_CHAIN_LOOP", "empty chain loop"),
    ("CHAIN_COUNTER", "too many chain counters"),
    ("BAD_CHAIN_CMD", "bad chain command"),
    ("BAD_CHAIN_DELAY", "bad chain delay micros"),
    ("CHAIN_NESTING", "chain counters nested too deeply"),
    ("CHAIN_TOO_BIG", "chain is too long"),
    ("DEPRECATED", "deprecated function removed"),  # -120
    ("BAD_SER_INVERT", "bit bang serial invert not 0 or 1"),
    ("BAD_EDGE", "bad ISR edge value, not 0..2"),
    ("BAD_ISR_INIT", "bad ISR initialisation"),
    ("BAD_FOREVER", "loop forever must be last chain command"),
    ("BAD_FILTER", "bad filter parameter"),
    ("BAD_PAD", "bad pad number"),
    ("BAD_STRENGTH", "bad pad drive strength"),
    ("FIL_OPEN_FAILED", "file open failed"),
    ("BAD_FILE_MODE", "bad file mode"),
    ("BAD_FILE_FLAG", "bad file flag"),  # -130
    ("BAD_FILE_READ", "bad file read"),
    ("BAD_FILE_WRITE", "bad file write"),
    ("FILE_NOT_ROPEN", "file not open for read"),
    ("FILE_NOT_WOPEN", "file not open for write"),
    ("BAD_FILE_SEEK", "bad file seek"),
    ("NO_FILE_MATCH", "no files match pattern"),
    ("NO_FILE_ACCESS", "no permission to access file"),
    ("FILE_IS_A_DIR", "file is a directory"),
    ("BAD_SHELL_STATUS", "bad shell return status"),
    ("BAD_SCRIPT_NAME", "bad script name"),  # -140
    ("BAD_SPI_BAUD", "SPI baud rate not 50..500k"),
    ("NOT_SPI_GPIO", "no bit bang SPI in progress on GPIO"),
    ("BAD_EVENT_ID", "bad event id"),
    ("CMD_INTERRUPTED", "command interrupted"),  # -144
)

_CLIENT_STATUS = {
    SOCK_READ_LEN: ("SOCK_READ_LEN", "socket read wrong length"),
    CMD_BAD: ("CMD_BAD", "command bad; not 0..117 or needs extension"),
}

UNKNOWN = ("UNKNOWN_ERROR", "unknown PI_error")


def _entry(status: int) -> Tuple[str, str]:
    if status in _CLIENT_STATUS:
        return _CLIENT_STATUS[status]
    index = -int(status)
    if 0 <= index < len(_STATUS):
        return _STATUS[index]
    return UNKNOWN


def status_name(status: int) -> str:
    """Symbolic name of a status; non-negative values are ``NO_ERROR``."""
    if status >= 0:
        return _STATUS[0][0]
    return _entry(status)[0]


def status_text(status: int) -> str:
    """Short English explanation of a status; never raises."""
    if status >= 0:
        return _STATUS[0][1]
    return _entry(status)[1]


def all_statuses() -> Tuple[Tuple[int, str, str], ...]:
    """Return ``(status, name, text)`` for every daemon and client code."""
    rows = [(-index, name, text) for index, (name, text) in enumerate(_STATUS)]
    rows.extend((code, name, text) for code, (name, text) in _CLIENT_STATUS.items())
    return tuple(rows)
