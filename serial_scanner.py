"""Serial barcode scanner input: raw bytes framed into barcode strings."""

import logging
import os
import threading
import time

import serial

CR = b"\r"


class CRLineFramer:
    """Split a byte stream into tokens terminated by carriage return.

    The delimiter is dropped. Bytes left over when the stream ends are
    returned by flush() as a final, unterminated token.
    """

    def __init__(self):
        self._buffer = bytearray()

    def feed(self, data: bytes):
        """Buffer data and return every complete token now available."""
        self._buffer.extend(data)
        tokens = []
        while True:
            i = self._buffer.find(CR)
            if i < 0:
                break
            tokens.append(bytes(self._buffer[:i]))
            del self._buffer[:i + 1]
        return tokens

    def flush(self):
        """End of stream: return the unterminated remainder, if any."""
        if not self._buffer:
            return None
        token = bytes(self._buffer)
        self._buffer.clear()
        return token


def decode_barcode(token: bytes) -> str:
    return token.decode("utf-8", errors="replace")


def frame_stream(chunks):
    """Yield barcode strings from an iterable of byte chunks."""
    framer = CRLineFramer()
    for chunk in chunks:
        for token in framer.feed(chunk):
            yield decode_barcode(token)
    rest = framer.flush()
    if rest is not None:
        yield decode_barcode(rest)


class SerialScannerListener:
    """Read raw bytes from a serial barcode scanner."""

    def __init__(self, port, *, baudrate=9600, read_timeout=0.25, port_handle=None):
        self.port = port
        self._closed = threading.Event()
        if port_handle is not None:
            self.device = port_handle
        else:
            self.device = serial.Serial(
                port=port,
                baudrate=baudrate,
                bytesize=8,
                parity='N',
                stopbits=1,
                timeout=read_timeout,
            )
            logging.info("Using barcode scanner %s @ %s baud", port, baudrate)

        # Optional observability (disabled by default)
        # Set PRICECHECK_SCANNER_HEARTBEAT_SECONDS=60 (or similar) to enable.
        try:
            self._heartbeat_interval_s = float(os.getenv('PRICECHECK_SCANNER_HEARTBEAT_SECONDS', '0') or '0')
        except ValueError:
            self._heartbeat_interval_s = 0.0
        self._last_heartbeat_log_ts = 0.0
        self._bytes_seen = 0

    def _maybe_log_heartbeat(self, now: float) -> None:
        if not self._heartbeat_interval_s or self._heartbeat_interval_s <= 0:
            return
        if self._last_heartbeat_log_ts and (now - self._last_heartbeat_log_ts) < self._heartbeat_interval_s:
            return
        self._last_heartbeat_log_ts = now
        logging.info("Scanner heartbeat: device=%s bytes=%s", self.port, self._bytes_seen)

    def read_chunks(self, stop_event=None):
        """Yield raw byte chunks until the scanner goes away, close() is called
        or stop_event is set.

        Read timeouts yield nothing so the loop keeps checking for a stop.
        A serial error (unplugged scanner) is treated as end of stream.
        """
        while not self._closed.is_set():
            if stop_event is not None and stop_event.is_set():
                return
            try:
                data = self.device.read(self.device.in_waiting or 1)
            except (serial.SerialException, OSError) as exc:
                if not self._closed.is_set():
                    logging.warning("Barcode scanner %s disconnected: %s", self.port, exc)
                return
            self._maybe_log_heartbeat(time.time())
            if data:
                self._bytes_seen += len(data)
                yield data

    def stream_scans(self, stop_event=None):
        """Yield decoded barcodes; the final unterminated token is flushed on disconnect."""
        return frame_stream(self.read_chunks(stop_event))

    def close(self):
        self._closed.set()
        try:
            self.device.close()
        except Exception as exc:
            logging.debug("Closing scanner %s failed: %s", self.port, exc)
