"""
Price-check pipeline

scanner bytes -> framer -> display echo -> item lookup -> result renderer -> consumer

Each stage runs in its own thread. Stages hand items over through
single-slot channels, so a slow lookup stalls the echo stage, which
stalls the framer, which stalls serial reads. One shared stop event
cancels every blocking send and receive.
"""

import logging
import threading
from queue import Empty, Full, Queue

from item_service.lookup_client import Found, NotFound, ServerError, TransportError
from pole_display import DisplayWriteError

POLL_SECONDS = 0.05
AFTER_RENDER_SECONDS = 15.0


class HandoffChannel:
    """Single-slot channel between two stages.

    send() and iteration give up as soon as the shared stop event is set.
    close() lets the consumer drain what was already handed over.
    """

    def __init__(self, stop_event, name=""):
        self.name = name
        self._queue = Queue(maxsize=1)
        self._closed = threading.Event()
        self._stop = stop_event

    def send(self, item) -> bool:
        """Block until the consumer has room; False if cancelled."""
        while not self._stop.is_set():
            try:
                self._queue.put(item, timeout=POLL_SECONDS)
                return True
            except Full:
                continue
        return False

    def close(self):
        self._closed.set()

    def __iter__(self):
        while not self._stop.is_set():
            try:
                item = self._queue.get(timeout=POLL_SECONDS)
            except Empty:
                if self._closed.is_set() and self._queue.empty():
                    return
                continue
            yield item


class PriceCheckPipeline:
    """Wire the four stages and run them until the scanner stream ends or stop() is called."""

    def __init__(self, scanner, display, lookup_client, idle_timer,
                 *, after_render_seconds=AFTER_RENDER_SECONDS, stop_event=None):
        self.scanner = scanner
        self.display = display
        self.lookup_client = lookup_client
        self.idle_timer = idle_timer
        self.after_render_seconds = after_render_seconds
        self.stop_event = stop_event or threading.Event()
        self.fatal_error = None
        self._fatal_lock = threading.Lock()
        self.threads = []

        self.barcodes = HandoffChannel(self.stop_event, "barcodes")
        self.echoed = HandoffChannel(self.stop_event, "echoed")
        self.outcomes = HandoffChannel(self.stop_event, "outcomes")
        self.rendered = HandoffChannel(self.stop_event, "rendered")

    # ---------- lifecycle ----------

    def start(self):
        """Start all stage threads and return the terminal output channel."""
        stages = [
            ("framer", self._frame_scans, self.barcodes),
            ("echo", self._echo_barcodes, self.echoed),
            ("lookup", self._lookup_items, self.outcomes),
            ("render", self._render_outcomes, self.rendered),
        ]
        for name, target, out in stages:
            thread = threading.Thread(
                target=self._run_stage,
                args=(name, target, out),
                name=f"PriceCheck[{name}]",
                daemon=True,
            )
            thread.start()
            self.threads.append(thread)
        return self.rendered

    def stop(self):
        self.stop_event.set()

    def join(self, timeout=None):
        for thread in self.threads:
            thread.join(timeout=timeout)

    def fail(self, exc):
        """Record an unrecoverable error and cancel every stage."""
        with self._fatal_lock:
            if self.fatal_error is None:
                self.fatal_error = exc
        logging.critical("💥 Unrecoverable kiosk error: %s", exc)
        self.stop_event.set()

    def _run_stage(self, name, target, out):
        try:
            target(out)
        except DisplayWriteError as e:
            self.fail(e)
        except Exception as e:
            logging.exception("Stage %s crashed", name)
            self.fail(e)
        finally:
            out.close()
            logging.debug("Stage %s stopped; closed %s channel", name, out.name)

    # ---------- stages ----------

    def _frame_scans(self, out):
        for barcode in self.scanner.stream_scans(self.stop_event):
            # A scan in progress must not be overwritten by the idle screen.
            self.idle_timer.stop()
            if not out.send(barcode):
                return

    def _echo_barcodes(self, out):
        for barcode in self.barcodes:
            self.display.show_checking(barcode)
            logging.info("Scanned: %s", barcode)
            if not out.send(barcode):
                return

    def _lookup_items(self, out):
        for barcode in self.echoed:
            outcome = self.lookup_client.lookup(barcode)
            if outcome is None:
                continue
            if not out.send(outcome):
                return

    def _render_outcomes(self, out):
        for outcome in self.outcomes:
            render_outcome(self.display, outcome)
            self.idle_timer.reset_to(self.after_render_seconds)
            if not out.send(outcome):
                return


def render_outcome(display, outcome):
    """Paint the layout for one lookup outcome."""
    if isinstance(outcome, Found):
        display.show_item(outcome.item)
    elif isinstance(outcome, NotFound):
        display.show_invalid()
    elif isinstance(outcome, (ServerError, TransportError)):
        display.show_server_problem()
    else:
        raise TypeError(f"Unknown lookup outcome: {outcome!r}")
