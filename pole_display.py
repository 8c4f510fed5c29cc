"""VFD pole display driver and the kiosk's screen layouts."""

import logging
import threading

import serial

from vfd_protocol import VfdProtocol, line_at_bottom, line_at_home

CHECKING_TEXT = "Checking Item..."
INVALID_TEXT = "Item Invalid"
SERVER_PROBLEM_TEXT = "Server Bermasalah"
ASK_CASHIER_TEXT = "Mohon cek di kasir"
IDLE_TOP_TEXT = "- CEK HARGA DISINI -"
IDLE_BOTTOM_TEXT = "   Praktis & Cepat  "


class DisplayWriteError(RuntimeError):
    """Writing to the pole display failed; the kiosk cannot continue."""


def format_price_line(price: int, unit: str) -> str:
    """Price left-justified in 12 columns, unit right-justified in 3."""
    return f"Rp. {price:<12d}/{unit:>3}"


class PoleDisplay:
    """
    Pole display on a serial port.

    Writers (echo stage, renderer, idle timer) share one handle, so every
    layout is written under a single lock.
    """

    def __init__(self, port_handle, name="display"):
        self.port = port_handle
        self.name = name
        self._lock = threading.Lock()

    @classmethod
    def open(cls, port, *, baudrate=9600):
        ser = serial.Serial(
            port=port,
            baudrate=baudrate,
            bytesize=8,
            parity='N',
            stopbits=1,
            write_timeout=1.0,
        )
        logging.info("Using pole display %s @ %s baud", port, baudrate)
        return cls(ser, name=port)

    def _send(self, *payloads: bytes):
        with self._lock:
            try:
                for payload in payloads:
                    self.port.write(payload)
                self.port.flush()
            except (serial.SerialException, OSError) as exc:
                raise DisplayWriteError(f"write to {self.name} failed: {exc}") from exc

    def show_lines(self, top: str, bottom: str):
        self._send(line_at_home(top), line_at_bottom(bottom))

    # ---------------------------
    # Layouts
    # ---------------------------

    def show_checking(self, barcode: str):
        """Echo a fresh scan while the lookup runs."""
        self.show_lines(CHECKING_TEXT, barcode)

    def show_item(self, item):
        self.show_lines(item.name_short, format_price_line(item.price, item.unit))

    def show_invalid(self):
        self.show_lines(INVALID_TEXT, ASK_CASHIER_TEXT)

    def show_server_problem(self):
        self.show_lines(SERVER_PROBLEM_TEXT, ASK_CASHIER_TEXT)

    def show_idle(self):
        """Advertising screen shown once the kiosk has been idle."""
        self._send(
            VfdProtocol.clear_screen(),
            line_at_home(IDLE_TOP_TEXT),
            line_at_bottom(IDLE_BOTTOM_TEXT),
        )

    def set_brightness(self, level: int):
        self._send(VfdProtocol.brightness(level))

    def set_blink(self, interval: int):
        self._send(VfdProtocol.blink(interval))

    def close(self):
        try:
            self.port.close()
        except Exception as exc:
            logging.debug("Closing %s failed: %s", self.name, exc)
