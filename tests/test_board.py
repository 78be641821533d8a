"""Tests for board descriptors."""

import pytest

from rpi_gpiod import pinmap
from rpi_gpiod.board import BoardDescriptor, BoardType, describe
from rpi_gpiod.config import HostEnvironment
from rpi_gpiod.errors import ERR_ASSIGN_PIN, InvalidPinError
from rpi_gpiod.pinmap import GPIO_IGNORE, PIN_GND


class TestDescribe:
    def test_keeps_valid_values(self, lan_env):
        desc = describe(3, "pi.local", 8889, 500, environment=lan_env)
        assert (desc.type, desc.host, desc.port, desc.timeout_ms) == (BoardType.PI3, "pi.local", 8889, 500)
        assert desc.timeout_s == pytest.approx(0.5)

    @pytest.mark.parametrize("port", [0, 19, 65536, -5])
    def test_clamps_port(self, port, lan_env):
        assert describe(3, "pi.local", port, 1000, environment=lan_env).port == 8888

    @pytest.mark.parametrize("timeout", [0, 299, 50001])
    def test_clamps_timeout(self, timeout, lan_env):
        assert describe(3, "pi.local", 8888, timeout, environment=lan_env).timeout_ms == 10000

    def test_bounds_are_inclusive(self, lan_env):
        desc = describe(3, "pi.local", 20, 300, environment=lan_env)
        assert (desc.port, desc.timeout_ms) == (20, 300)
        desc = describe(3, "pi.local", 65535, 50000, environment=lan_env)
        assert (desc.port, desc.timeout_ms) == (65535, 50000)

    @pytest.mark.parametrize("host", [None, "", "ab", "  "])
    def test_default_host_off_pi(self, host, lan_env):
        assert describe(3, host, environment=lan_env).host == "10.1.2.67"

    def test_default_host_on_pi(self, pi_env):
        assert describe(3, None, environment=pi_env).host == "127.0.0.1"

    def test_fallback_without_ipv4(self):
        env = HostEnvironment(on_pi=False, host_name="x", host_ipv4=None)
        assert describe(3, None, environment=env).host == "192.168.178.67"

    @pytest.mark.parametrize("raw, expected", [(0, 0), (1, 1), (2, 2), (4, 4), (7, 3), (-1, 3), (None, 3), ("x", 3)])
    def test_normalizes_type(self, raw, expected, lan_env):
        assert describe(raw, "pi.local", environment=lan_env).type == expected


class TestEquality:
    def test_same_type_different_endpoint_equal(self, lan_env):
        a = describe(3, "10.0.0.1", 8888, 1000, environment=lan_env)
        b = describe(3, "10.0.0.2", 9999, 2000, environment=lan_env)
        assert a == b
        assert hash(a) == hash(b)
        assert not a.same_endpoint(b)
        assert len({a, b}) == 1

    def test_different_type_never_equal(self, lan_env):
        a = describe(3, "10.0.0.1", 8888, 1000, environment=lan_env)
        b = describe(1, "10.0.0.1", 8888, 1000, environment=lan_env)
        assert a != b
        assert a.same_endpoint(b)

    def test_not_equal_to_other_objects(self, lan_env):
        assert describe(3, "pi.local", environment=lan_env) != 3

    def test_is_immutable(self, lan_env):
        desc = describe(3, "pi.local", environment=lan_env)
        with pytest.raises(AttributeError):
            desc.host = "other"  # type: ignore[misc]


class TestPinMapping:
    @pytest.fixture
    def pi3(self, lan_env) -> BoardDescriptor:
        return describe(3, "pi.local", environment=lan_env)

    def test_gpio_for_pin(self, pi3):
        assert pi3.gpio_for_pin("red LED", 11) == 17
        assert pi3.pin_for_gpio(17) == 11

    def test_ground_pin_raises(self, pi3):
        with pytest.raises(InvalidPinError) as info:
            pi3.gpio_for_pin("red LED", 6)
        err = info.value
        assert err.label == "red LED"
        assert err.pin == 6
        assert err.gpio == PIN_GND
        assert err.code == ERR_ASSIGN_PIN
        assert "red LED" in str(err)

    @pytest.mark.parametrize("pin", [1, 2, 27, 41, -3, 0])
    def test_invalid_pins_raise(self, pi3, pin):
        with pytest.raises(InvalidPinError):
            pi3.gpio_for_pin("sig", pin)

    def test_unwired_pin_allowed_on_request(self, pi3):
        assert pi3.gpio_for_pin("buzzer", 0, allow_unwired=True) == GPIO_IGNORE
        assert pi3.gpio_for_pin_checked("buzzer", 0, allow_unwired=True) == GPIO_IGNORE

    def test_checked_mapping(self, pi3):
        assert pi3.gpio_for_pin_checked("grn LED", 13) == 27

    def test_pin_only_on_larger_header(self, lan_env):
        pi1 = describe(1, "pi.local", environment=lan_env)
        with pytest.raises(InvalidPinError):
            pi1.gpio_for_pin("grn LED", 29)

    def test_checked_accepts_family_maximum(self, lan_env):
        pi2 = describe(2, "pi.local", environment=lan_env)
        assert pi2.gpio_for_pin_checked("p5", 36) == 31
        pi1 = describe(1, "pi.local", environment=lan_env)
        assert pi1.gpio_for_pin_checked("a", 22) == 25

    def test_checked_rejects_above_family_limit(self, lan_env, monkeypatch):
        tiny = pinmap.BoardFamily(name="tiny", header_pins=26, table=pinmap.PI1.table, max_output_gpio=20)
        monkeypatch.setitem(pinmap.FAMILIES, 1, tiny)
        pi1 = describe(1, "pi.local", environment=lan_env)
        assert pi1.gpio_for_pin("a", 22) == 25
        with pytest.raises(InvalidPinError) as info:
            pi1.gpio_for_pin_checked("a", 22)
        assert info.value.gpio == 25
