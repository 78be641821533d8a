import socket
import struct
import threading
import time
from typing import Callable, Dict, List, Optional, Tuple

import pytest

from rpi_gpiod.board import describe
from rpi_gpiod.config import HostEnvironment

REQUEST = struct.Struct("<IIII")
RESPONSE = struct.Struct("<IIIi")


class MockDaemon:
    """Minimal pigpiod stand-in speaking the 16 byte frame protocol.

    Every request frame is recorded. The answer is taken from ``responses``
    (opcode -> result, default 0) or from ``handler`` if set.
    """

    def __init__(self) -> None:
        self._server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        self._server.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        self._server.bind(("127.0.0.1", 0))
        self._server.listen(4)
        self._server.settimeout(0.1)
        self.port = self._server.getsockname()[1]
        self.frames: List[Tuple[int, int, int, int]] = []
        self.responses: Dict[int, int] = {}
        self.handler: Optional[Callable[[int, int, int], int]] = None
        self.silent = False  # read requests but never answer
        self.hang_up_after: Optional[int] = None  # close after n frames
        self.short_reply = False  # answer with 8 bytes and close
        self.reply_delay = 0.0  # seconds to wait before answering
        self.reply_header: Optional[Tuple[int, int, int]] = None  # echo this instead of the request
        self._lock = threading.Lock()
        self._stop = threading.Event()
        self._clients: List[socket.socket] = []
        self._thread = threading.Thread(target=self._accept_loop, name="mock_pigpiod", daemon=True)

    def start(self) -> "MockDaemon":
        self._thread.start()
        return self

    def stop(self) -> None:
        self._stop.set()
        self._server.close()
        with self._lock:
            clients = list(self._clients)
        for client in clients:
            try:
                client.close()
            except OSError:
                pass
        self._thread.join(timeout=2)

    def descriptor(self, board: int = 3, timeout_ms: int = 2000):
        return describe(board, "127.0.0.1", self.port, timeout_ms)

    def opcodes(self) -> List[int]:
        with self._lock:
            return [frame[0] for frame in self.frames]

    def _accept_loop(self) -> None:
        while not self._stop.is_set():
            try:
                client, _ = self._server.accept()
            except socket.timeout:
                continue
            except OSError:
                return
            client.settimeout(None)
            with self._lock:
                self._clients.append(client)
            threading.Thread(target=self._serve, args=(client,), daemon=True).start()

    def _read_frame(self, client: socket.socket) -> Optional[bytes]:
        data = b""
        while len(data) < REQUEST.size:
            chunk = client.recv(REQUEST.size - len(data))
            if not chunk:
                return None
            data += chunk
        return data

    def _serve(self, client: socket.socket) -> None:
        with client:
            while not self._stop.is_set():
                try:
                    data = self._read_frame(client)
                except OSError:
                    return
                if data is None:
                    return
                cmd, p1, p2, p3 = REQUEST.unpack(data)
                with self._lock:
                    self.frames.append((cmd, p1, p2, p3))
                    count = len(self.frames)
                if self.hang_up_after is not None and count >= self.hang_up_after:
                    return
                if self.silent:
                    continue
                if self.handler is not None:
                    result = self.handler(cmd, p1, p2)
                else:
                    result = self.responses.get(cmd, 0)
                delay = self.reply_delay
                if delay:
                    time.sleep(delay)
                header = self.reply_header or (cmd, p1, p2)
                reply = RESPONSE.pack(*header, result)
                try:
                    if self.short_reply:
                        client.sendall(reply[:8])
                        return
                    client.sendall(reply)
                except OSError:
                    return


@pytest.fixture
def daemon():
    mock = MockDaemon().start()
    yield mock
    mock.stop()


@pytest.fixture
def connection(daemon):
    from rpi_gpiod.client import connect

    conn = connect(daemon.descriptor())
    yield conn
    conn.disconnect()


@pytest.fixture
def lan_env() -> HostEnvironment:
    return HostEnvironment(on_pi=False, host_name="devbox", host_ipv4="10.1.2.33")


@pytest.fixture
def pi_env() -> HostEnvironment:
    return HostEnvironment(on_pi=True, host_name="raspberrypi", host_ipv4="192.168.1.50")
