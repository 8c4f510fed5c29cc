#!/usr/bin/env python3
"""
Price-check kiosk
Serial barcode scanner in, store item service lookup, VFD pole display out.
"""

import argparse
import json
import logging
import logging.handlers
import os
import signal
import sys
import threading

import serial

from idle_timer import IdleResetTimer
from item_service.lookup_client import DEFAULT_BASE_URL, ItemLookupClient, LookupConfig
from path_utils import get_log_dir, resolve_path
from pipeline import PriceCheckPipeline
from pole_display import DisplayWriteError, PoleDisplay
from serial_scanner import SerialScannerListener

SCANNER_PORT_ENV = "PORT_BARCODE_SCANNER"
DISPLAY_PORT_ENV = "PORT_POLE_DISPLAY"
DEFAULT_SCANNER_PORT = "/dev/ttyACM0"
DEFAULT_DISPLAY_PORT = "/dev/ttyACM1"


def _env_int(name: str, default: int) -> int:
    try:
        return int((os.environ.get(name) or "").strip() or default)
    except ValueError:
        return default


# Configure logging (rotate to keep the SD card from filling up)
def _build_log_handlers():
    log_dir = get_log_dir()
    max_mb = _env_int('PRICECHECK_LOG_MAX_MB', 10)
    if max_mb <= 0:
        max_mb = 10
    backups = _env_int('PRICECHECK_LOG_BACKUPS', 3)
    if backups < 0:
        backups = 0

    rotating = logging.handlers.RotatingFileHandler(
        log_dir / 'price_check.log',
        maxBytes=max_mb * 1024 * 1024,
        backupCount=backups,
    )
    stream = logging.StreamHandler()
    return [rotating, stream]


def configure_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=_build_log_handlers(),
    )


class PriceCheckConfig:
    """Configuration management for the price-check kiosk"""

    def __init__(self, config_file='config.json'):
        self.config_file = resolve_path(config_file)
        self.default_config = {
            "scanner": {
                "port": DEFAULT_SCANNER_PORT,
                "baudrate": 9600,
                "read_timeout": 0.25
            },
            "display": {
                "port": DEFAULT_DISPLAY_PORT,
                "baudrate": 9600,
                # 1-4; null leaves the display at its power-on level
                "brightness": None
            },
            "lookup": {
                "base_url": DEFAULT_BASE_URL,
                # null = wait for the item service indefinitely
                "timeout_seconds": None
            },
            "idle": {
                "initial_seconds": 600,
                "warmup_seconds": 1,
                "warmup_delay_seconds": 2,
                "steady_seconds": 30,
                "after_render_seconds": 15
            }
        }
        self.load_config()

    def load_config(self):
        """Load configuration from file or create default"""
        if self.config_file.exists():
            with open(self.config_file, 'r') as f:
                self.config = json.load(f)
        else:
            self.config = json.loads(json.dumps(self.default_config))
            self.save_config()

    def save_config(self):
        """Save current configuration to file"""
        with open(self.config_file, 'w') as f:
            json.dump(self.config, f, indent=2)

    def get(self, key_path, default=None):
        """Get nested configuration value"""
        keys = key_path.split('.')
        value = self.config
        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default
        return value


def resolve_device_ports(config, environ=None):
    """Return (scanner_port, display_port).

    The environment wins only when both variables are set; otherwise the
    configured (or built-in default) ports are used.
    """
    environ = os.environ if environ is None else environ
    scanner_port = environ.get(SCANNER_PORT_ENV) or ""
    display_port = environ.get(DISPLAY_PORT_ENV) or ""
    if scanner_port and display_port:
        return scanner_port, display_port
    return (
        config.get('scanner.port') or DEFAULT_SCANNER_PORT,
        config.get('display.port') or DEFAULT_DISPLAY_PORT,
    )


class PriceCheckKiosk:
    """Main price-check application"""

    def __init__(self, config, *, scanner_port=None, display_port=None, base_url=None):
        self.config = config
        env_scanner, env_display = resolve_device_ports(config)
        self.scanner_port = scanner_port or env_scanner
        self.display_port = display_port or env_display
        self.lookup_client = ItemLookupClient(LookupConfig(
            base_url=base_url or config.get('lookup.base_url', DEFAULT_BASE_URL),
            timeout_seconds=config.get('lookup.timeout_seconds'),
        ))
        self.scanner = None
        self.display = None
        self.idle_timer = None
        self.pipeline = None
        self._settle_timer = None
        self.stop_event = threading.Event()

    def open_devices(self):
        """Open scanner and display; any failure here is fatal."""
        self.scanner = SerialScannerListener(
            self.scanner_port,
            baudrate=int(self.config.get('scanner.baudrate', 9600)),
            read_timeout=float(self.config.get('scanner.read_timeout', 0.25)),
        )
        self.display = PoleDisplay.open(
            self.display_port,
            baudrate=int(self.config.get('display.baudrate', 9600)),
        )
        brightness = self.config.get('display.brightness')
        if brightness is not None:
            self.display.set_brightness(int(brightness))

    def _show_idle(self):
        try:
            self.display.show_idle()
        except DisplayWriteError as e:
            if self.pipeline:
                self.pipeline.fail(e)
            else:
                logging.critical("💥 Unrecoverable kiosk error: %s", e)
                self.stop_event.set()

    def _schedule_warmup(self):
        """Show the idle screen shortly after boot, then settle on the steady interval."""
        self.idle_timer.reset_to(float(self.config.get('idle.warmup_seconds', 1)))
        settle = threading.Timer(
            float(self.config.get('idle.warmup_delay_seconds', 2)),
            self.idle_timer.reset_to,
            args=(float(self.config.get('idle.steady_seconds', 30)),),
        )
        settle.daemon = True
        settle.start()
        self._settle_timer = settle

    def stop(self):
        self.stop_event.set()

    def run(self) -> int:
        try:
            self.open_devices()
        except (serial.SerialException, OSError, DisplayWriteError, ValueError) as e:
            logging.error(f"❌ Failed to open devices: {e}")
            self.cleanup()
            return 1

        self.idle_timer = IdleResetTimer(
            self._show_idle,
            initial_seconds=float(self.config.get('idle.initial_seconds', 600)),
        )
        self.pipeline = PriceCheckPipeline(
            self.scanner,
            self.display,
            self.lookup_client,
            self.idle_timer,
            after_render_seconds=float(self.config.get('idle.after_render_seconds', 15)),
            stop_event=self.stop_event,
        )
        output = self.pipeline.start()
        self._schedule_warmup()
        logging.info("Ready. scanner=%s display=%s", self.scanner_port, self.display_port)

        try:
            for outcome in output:
                logging.info("Result: %r", outcome)
        finally:
            self.stop_event.set()
            self.pipeline.join(timeout=2.0)
            self.cleanup()

        if self.pipeline.fatal_error is not None:
            return 1
        return 0

    def cleanup(self):
        """Clean up resources"""
        if self._settle_timer:
            self._settle_timer.cancel()
        if self.idle_timer:
            self.idle_timer.stop()
        if self.scanner:
            self.scanner.close()
        if self.display:
            self.display.close()
        logging.info("Kiosk cleanup completed")


def main(argv=None):
    """Main entry point"""
    parser = argparse.ArgumentParser(description='Price-check kiosk')
    parser.add_argument('--config', default='config.json',
                        help='Configuration file path')
    parser.add_argument('--scanner-port',
                        help='Override barcode scanner serial port')
    parser.add_argument('--display-port',
                        help='Override pole display serial port')
    parser.add_argument('--base-url',
                        help='Override item service base URL')
    parser.add_argument('--debug', action='store_true',
                        help='Log at DEBUG level')

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.debug else logging.INFO)

    try:
        config = PriceCheckConfig(args.config)
        kiosk = PriceCheckKiosk(
            config,
            scanner_port=args.scanner_port,
            display_port=args.display_port,
            base_url=args.base_url,
        )
    except (OSError, ValueError) as e:
        logging.error(f"Failed to start kiosk: {e}")
        return 1

    def _handle_signal(_sig, _frame):
        logging.info("Stop requested")
        kiosk.stop()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    return kiosk.run()


if __name__ == "__main__":
    sys.exit(main())
