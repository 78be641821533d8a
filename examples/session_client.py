#!/usr/bin/env python3
"""Example: drive an LED on connector pin 11 through pigpiod.

Run this on the Pi (or point --host at it). The GPIO lock is skipped so the
example works without /home/pi/bin/.lockPiGpio.
"""

import argparse
import time

from rpi_gpiod.board import describe
from rpi_gpiod.protocol import HIGH, LOW
from rpi_gpiod.session import GpioSession


def main():
    parser = argparse.ArgumentParser(description="Toggle one LED a few times")
    parser.add_argument("--host", default=None)
    parser.add_argument("--pin", type=int, default=11)
    args = parser.parse_args()

    with GpioSession(describe(3, args.host), use_lock=False) as session:
        gpio = session.gpio("LED", args.pin)
        conn = session.connection
        print(conn.log_command(conn.init_as_output(gpio, LOW)).describe())
        for _ in range(5):
            conn.set_output(gpio, HIGH)
            time.sleep(0.5)
            conn.set_output(gpio, LOW)
            time.sleep(0.5)
        print(conn.read_bank().describe())
        # leaving the block switches the LED line back to input


if __name__ == "__main__":
    main()
