"""Tests for the LED blink service."""

import signal
import socket

import pytest

from rpi_gpiod import blink
from rpi_gpiod.blink import PRESETS, BlinkService, LedPins
from rpi_gpiod.protocol import Cmd, Mode, Pud
from rpi_gpiod.session import GpioSession


class InstantTimer:
    """Cycle timer stand-in that never sleeps."""

    overruns = 0

    def __init__(self) -> None:
        self.waits = 0

    def restart(self) -> None:
        pass

    def wait(self, stop=None) -> bool:
        self.waits += 1
        return not (stop is not None and stop.is_set())


@pytest.fixture
def session(daemon):
    sess = GpioSession(daemon.descriptor(), use_lock=False).start()
    yield sess
    sess.stop()


class TestBlinkService:
    def test_setup_configures_leds(self, daemon, session):
        service = BlinkService(session, LedPins(), timer=InstantTimer())
        service.setup()
        assert service.gpios["red"] == 17
        assert service.gpios["yellow"] == 25
        assert service.gpios["green"] == 27
        assert daemon.frames == [
            (Cmd.MODES, 17, Mode.OUTPUT, 0),
            (Cmd.MODES, 27, Mode.OUTPUT, 0),
            (Cmd.PUD, 27, Pud.UP, 0),
            (Cmd.MODES, 25, Mode.OUTPUT, 0),
            (Cmd.PADS, 0, 14, 0),
        ]

    def test_two_cycles(self, daemon, session):
        timer = InstantTimer()
        service = BlinkService(session, LedPins(), timer=timer)
        service.setup()
        del daemon.frames[:]
        assert service.run(limit=2) == 2
        writes = [(p1, p2) for cmd, p1, p2, _ in daemon.frames if cmd == Cmd.WRITE]
        assert writes == [
            (17, 1), (25, 1), (27, 1), (17, 0), (27, 0),
            (17, 1), (25, 0), (27, 1), (17, 0), (27, 0),
        ]
        assert timer.waits == 12
        assert session.connection.outputs == [17, 25, 27]

    def test_stop_event_ends_loop(self, daemon, session):
        service = BlinkService(session, LedPins(), timer=InstantTimer())
        service.setup()
        service.stop_event.set()
        assert service.run() == 0

    def test_button_switches_buzzer(self, daemon, session):
        daemon.responses[Cmd.READ] = 0  # pressed, low active
        pins = LedPins(buzzer=12, button=7)
        service = BlinkService(session, pins, timer=InstantTimer())
        service.setup()
        service.run(limit=1)
        writes = [(p1, p2) for cmd, p1, p2, _ in daemon.frames if cmd == Cmd.WRITE]
        assert (18, 1) in writes
        assert (Cmd.PUD, 4, Pud.UP, 0) in daemon.frames

    def test_presets(self):
        assert LedPins.preset("south") == LedPins(red=11, yellow=13, green=15)
        assert set(PRESETS) == {"default", "north", "east", "south", "west"}


class TestMain:
    @pytest.fixture(autouse=True)
    def no_signal_handlers(self, monkeypatch):
        monkeypatch.setattr(signal, "signal", lambda *args: None)

    def test_runs_cycles_and_releases(self, daemon):
        code = blink.main(["--no-lock", "--host", "127.0.0.1", "--port", str(daemon.port), "--cycles", "1"])
        assert code == 0
        assert daemon.frames[-1][0] == Cmd.MODES
        assert daemon.frames[-1][2] == Mode.INPUT

    def test_connect_failure_exit_code(self, capsys):
        with socket.socket() as probe:
            probe.bind(("127.0.0.1", 0))
            port = probe.getsockname()[1]
        code = blink.main(["--no-lock", "--host", "127.0.0.1", "--port", str(port), "--timeout-ms", "500"])
        assert code == 85
        assert "can't connect pigpioD" in capsys.readouterr().err

    def test_bad_pin_exit_code(self, daemon, capsys):
        code = blink.main(["--no-lock", "--host", "127.0.0.1", "--port", str(daemon.port), "--red", "6"])
        assert code == 86
        assert "no IO pin" in capsys.readouterr().err

    def test_lock_missing_exit_code(self, tmp_path, capsys):
        code = blink.main(["--lock-path", str(tmp_path / "missing"), "--host", "127.0.0.1"])
        assert code == 97

    def test_bad_config_exit_code(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("board: nope\n")
        assert blink.main(["--config", str(path)]) == 78
