from types import SimpleNamespace

import detect_ports


def port_info(device, description, vid=None, pid=None):
    return SimpleNamespace(
        device=device, description=description, manufacturer=None, product=None, vid=vid, pid=pid,
    )


def test_detect_ports_guesses_roles(monkeypatch):
    monkeypatch.setattr(detect_ports.list_ports, "comports", lambda: [
        port_info("/dev/ttyUSB0", "USB-Serial Controller PL2303", 0x067b, 0x2303),
        port_info("/dev/ttyACM0", "Honeywell Barcode Scanner", 0x0c2e, 0x0b61),
        port_info("/dev/ttyS0", "ttyS0"),
    ])
    ports = {p['path']: p for p in detect_ports.detect_ports()}

    assert ports["/dev/ttyACM0"]['role'] == "scanner"
    assert ports["/dev/ttyUSB0"]['role'] == "display"
    assert ports["/dev/ttyUSB0"]['vendor_id'] == "067b"
    assert ports["/dev/ttyS0"]['role'] == "unknown"
    assert ports["/dev/ttyS0"]['product_id'] == "unknown"


def test_main_prints_env_template(monkeypatch, capsys):
    monkeypatch.setattr(detect_ports.list_ports, "comports", lambda: [
        port_info("/dev/ttyACM0", "Barcode Scanner"),
        port_info("/dev/ttyUSB0", "VFD pole display"),
    ])
    detect_ports.main()
    out = capsys.readouterr().out
    assert "PORT_BARCODE_SCANNER=" in out
    assert "PORT_POLE_DISPLAY=" in out
