"""Shared fakes for price-check tests: serial ports, HTTP session, timer."""

import sys
import threading
from pathlib import Path

import pytest
import requests
import serial

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pole_display import PoleDisplay
from serial_scanner import frame_stream


class FakeSerial:
    """Stands in for serial.Serial: records writes, replays reads."""

    def __init__(self, chunks=(), fail_on_write=False):
        self.written = bytearray()
        self.writes = []
        self._chunks = list(chunks)
        self.fail_on_write = fail_on_write
        self.closed = False

    @property
    def in_waiting(self):
        return len(self._chunks[0]) if self._chunks else 0

    def read(self, size=1):
        if self.closed:
            raise serial.SerialException("port closed")
        if not self._chunks:
            raise serial.SerialException("device disconnected")
        return self._chunks.pop(0)

    def write(self, data):
        if self.fail_on_write:
            raise serial.SerialException("write failed")
        self.writes.append(bytes(data))
        self.written.extend(data)
        return len(data)

    def flush(self):
        pass

    def close(self):
        self.closed = True


class VfdScreen:
    """Interpret the pole display byte stream into two 20-column lines."""

    def __init__(self, columns=20):
        self.columns = columns
        self.rows = [[" "] * columns, [" "] * columns]
        self.row = 0
        self.col = 0

    def feed(self, data: bytes):
        i = 0
        while i < len(data):
            b = data[i]
            if b == 0x1F and data[i + 1] == 0x42:
                self.row, self.col = 1, 0
                i += 2
                continue
            if b == 0x0B:
                self.row, self.col = 0, 0
            elif b == 0x0C:
                self.rows = [[" "] * self.columns, [" "] * self.columns]
                self.row, self.col = 0, 0
            elif b == 0x18:
                self.rows[self.row] = [" "] * self.columns
                self.col = 0
            else:
                if self.col < self.columns:
                    self.rows[self.row][self.col] = chr(b)
                self.col += 1
            i += 1
        return self

    @property
    def lines(self):
        return tuple("".join(r).rstrip() for r in self.rows)


class FakeResponse:
    def __init__(self, status_code, json_body=None, text=""):
        self.status_code = status_code
        self._json = json_body
        self.text = text
        self.closed = False

    def json(self):
        if self._json is None:
            raise requests.exceptions.JSONDecodeError("Expecting value", self.text, 0)
        return self._json

    def close(self):
        self.closed = True


class FakeSession:
    """Maps item keys to responses (or exceptions) and records requests."""

    def __init__(self, routes=None):
        self.routes = routes or {}
        self.requests = []

    def get(self, url, headers=None, timeout=None):
        self.requests.append({"url": url, "headers": headers, "timeout": timeout})
        key = url.rsplit("/", 1)[-1]
        result = self.routes.get(key, FakeResponse(404))
        if isinstance(result, Exception):
            raise result
        return result


class RecordingTimer:
    """Idle timer double that records stop/reset_to calls."""

    def __init__(self):
        self.calls = []
        self.lock = threading.Lock()

    def stop(self):
        with self.lock:
            self.calls.append(("stop",))

    def reset_to(self, seconds):
        with self.lock:
            self.calls.append(("reset_to", seconds))

    @property
    def resets(self):
        return [c[1] for c in self.calls if c[0] == "reset_to"]


class ChunkScanner:
    """Scanner double fed with raw byte chunks; the stream ends after the last one."""

    def __init__(self, chunks):
        self.chunks = list(chunks)

    def stream_scans(self, stop_event=None):
        return frame_stream(iter(self.chunks))

    def close(self):
        self.chunks = []


@pytest.fixture
def fake_port():
    return FakeSerial()


@pytest.fixture
def display(fake_port):
    return PoleDisplay(fake_port, name="fake-display")


@pytest.fixture
def timer():
    return RecordingTimer()


def screen_of(port):
    return VfdScreen().feed(bytes(port.written))


def item_json(name_short="COLA 1.5L", price=15000, unit="PCS", upc="8991234567890"):
    return {
        "upc": upc,
        "name": f"{name_short} LONG NAME",
        "nameShort": name_short,
        "price": price,
        "unit": unit,
        "useTax": True,
    }
