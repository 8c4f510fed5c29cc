#!/usr/bin/env python3
"""
Detect connected serial devices (barcode scanner, pole display)
Run this to identify device paths for configuration
"""

from pathlib import Path

from serial.tools import list_ports

SCANNER_KEYWORDS = ("scanner", "barcode", "honeywell", "symbol", "datalogic", "zebra", "newland")
DISPLAY_KEYWORDS = ("vfd", "display", "pole", "pl2303", "ch340", "ftdi", "ft232")


def _build_symlink_targets(dir_path: Path):
    """Return {resolved_target: [symlink_paths...]} for a /dev/serial/by-* directory."""
    mapping = {}
    if not dir_path.exists():
        return mapping
    for symlink in dir_path.iterdir():
        try:
            if not symlink.is_symlink():
                continue
            target = symlink.resolve()
            mapping.setdefault(str(target), []).append(str(symlink))
        except OSError:
            continue
    return mapping


def _guess_role(port_info):
    text = " ".join(
        str(part or "") for part in (port_info.description, port_info.manufacturer, port_info.product)
    ).lower()
    if any(keyword in text for keyword in SCANNER_KEYWORDS):
        return "scanner"
    if any(keyword in text for keyword in DISPLAY_KEYWORDS):
        return "display"
    return "unknown"


def detect_ports():
    """List serial ports with a stable path and a role guess."""
    by_id_targets = _build_symlink_targets(Path('/dev/serial/by-id'))
    ports = []
    for info in sorted(list_ports.comports(), key=lambda p: p.device):
        links = sorted(by_id_targets.get(str(Path(info.device).resolve()), []))
        ports.append({
            'path': info.device,
            'stable_path': links[0] if links else info.device,
            'description': info.description,
            'vendor_id': f"{info.vid:04x}" if info.vid is not None else 'unknown',
            'product_id': f"{info.pid:04x}" if info.pid is not None else 'unknown',
            'role': _guess_role(info),
        })
    return ports


def main():
    print("🔍 Detecting serial devices...\n")

    ports = detect_ports()

    if not ports:
        print("❌ No serial devices found")
        print("\nMake sure:")
        print("  1. The barcode scanner is in USB-serial (CDC) mode")
        print("  2. The pole display's USB-serial adapter is plugged in")
        return

    print(f"✅ Found {len(ports)} device(s):\n")

    for i, port in enumerate(ports, 1):
        marker = "⭐" if port['role'] != "unknown" else "⚠️"
        print(f"{marker} Device {i}: {port['description']} ({port['role']})")
        print(f"   Stable Path: {port['stable_path']}")
        print(f"   Device Path: {port['path']}")
        print(f"   VID/PID: {port['vendor_id']}/{port['product_id']}")
        print()

    scanner = next((p for p in ports if p['role'] == "scanner"), ports[0])
    display = next((p for p in ports if p['role'] == "display" and p is not scanner), None)
    if display is None:
        display = next((p for p in ports if p is not scanner), None)

    print("\n📋 Environment template (both must be set):\n")
    print(f"PORT_BARCODE_SCANNER={scanner['stable_path']}")
    print(f"PORT_POLE_DISPLAY={display['stable_path'] if display else '<display port>'}")


if __name__ == "__main__":
    main()
