# rackfeed_core/data/devices.py
"""Device inventory ingestion.

The inventory is a CSV export with one row per device model. Column headers are
matched by keyword so minor spelling differences between exports still load.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from pathlib import Path

from pydantic import ValidationError

from rackfeed_core.models.device import Device, RackGroup

logger = logging.getLogger("rackfeed.data.devices")

DEFAULT_DEVICES_PATH = Path("doctrine/power/devices.csv")
DEFAULT_CONNECTION_TYPE = "C13"
TYPICAL_POWER_FRACTION = 0.6  # typical draw assumed when the export leaves it blank

# column -> header keywords (case-insensitive substring match, first header wins)
COLUMN_KEYWORDS: dict[str, list[str]] = {
    "room": ["Room"],
    "device": ["Device"],
    "rack_u": ["Rack Size", "Size (U)"],
    "qty": ["Total No. of Device"],
    "psu_total": ["Total No. of PS"],
    "max_power": ["Max Power (Watt)"],
    "typical_power": ["Typical Power"],
    "total_max_power": ["Total Max Power Consumption"],
    "connection_type": ["Connection Type"],
    "psu_rating": ["PSU Rating"],
}

_INT_RE = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_RE = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")


def _parse_int(text: str) -> int | None:
    m = _INT_RE.match(text or "")
    return int(m.group(1)) if m else None


def _parse_float(text: str) -> float | None:
    m = _FLOAT_RE.match(text or "")
    return float(m.group(1)) if m else None


def _column_index(headers: list[str], keywords: list[str]) -> int:
    for i, header in enumerate(headers):
        h = header.lower()
        if any(k.lower() in h for k in keywords):
            return i
    return -1


def _cell(row: list[str], idx: int) -> str:
    if idx < 0 or idx >= len(row):
        return ""
    return row[idx].strip().strip('"').strip()


def _max_power(row: list[str], cols: dict[str, int], qty: int, psus_per_device: int) -> float:
    raw_max = _parse_float(_cell(row, cols["max_power"]))
    raw_total = _parse_float(_cell(row, cols["total_max_power"]))
    raw_rating = _parse_float(_cell(row, cols["psu_rating"]))

    if raw_max is not None and raw_max > 0:
        return raw_max
    if raw_total is not None and raw_total > 0:
        return raw_total / qty
    if raw_rating is not None:
        return raw_rating * psus_per_device
    return 0.0


def parse_device_csv(csv_text: str) -> list[RackGroup]:
    """Parse an inventory export into per-room device lists.

    Each row expands into ``Total No. of Device`` individual devices with the
    PSU count and power divided per unit. Devices come back unplaced and
    unconnected; rack placement is a separate step.
    """
    lines = csv_text.strip().splitlines()
    if len(lines) < 2:
        return []

    rows = list(csv.reader(lines))
    headers = [h.strip().strip('"').strip() for h in rows[0]]
    cols = {name: _column_index(headers, keywords) for name, keywords in COLUMN_KEYWORDS.items()}
    missing = [name for name, idx in cols.items() if idx < 0]
    if missing:
        logger.debug("Inventory columns not found: %s", ", ".join(missing))

    rooms: dict[str, list[Device]] = {}
    for line_no, row in enumerate(rows[1:], start=1):
        if len(row) < len(headers) * 0.5:
            continue

        room = _cell(row, cols["room"]) or "Unknown Room"
        device_name = _cell(row, cols["device"]) or "Unknown Device"
        qty = max(1, _parse_int(_cell(row, cols["qty"])) or 1)
        psu_total = _parse_int(_cell(row, cols["psu_total"])) or 1
        psus_per_device = max(1, psu_total // qty)

        raw_u = _parse_int(_cell(row, cols["rack_u"]))
        u_height = raw_u if raw_u is not None and raw_u > 0 else 1

        max_power = _max_power(row, cols, qty, psus_per_device)
        typical = _parse_float(_cell(row, cols["typical_power"]))
        if typical is None:
            typical = max_power * TYPICAL_POWER_FRACTION

        connection_type = _cell(row, cols["connection_type"]) or DEFAULT_CONNECTION_TYPE

        for k in range(qty):
            device_id = re.sub(r"\s+", "-", f"{room}-{device_name}-{line_no}-{k}")
            try:
                device = Device(
                    id=device_id,
                    name=device_name,
                    room=room,
                    psu_count=psus_per_device,
                    typical_power=typical,
                    power_rating=max_power,
                    connection_type=connection_type,
                    u_height=u_height,
                )
            except ValidationError as e:
                raise ValueError(f"Invalid device on line {line_no + 1} ({device_name}): {e}") from e
            rooms.setdefault(room, []).append(device)

    return [
        RackGroup(room_id=room, devices=devices, total_power=sum(d.power_rating for d in devices))
        for room, devices in rooms.items()
    ]


def load_device_csv(path: Path | str = DEFAULT_DEVICES_PATH) -> list[RackGroup]:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"File not found: {p}")
    return parse_device_csv(p.read_text(encoding="utf-8"))


def export_devices_csv(devices: list[Device], path: Path | str) -> Path:
    """Write one row per device PSU with its PDU and socket (blank when unconnected)."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(["device_id", "name", "room", "u_position", "u_height", "psu", "pdu_id", "socket"])
    for d in devices:
        for i, conn in enumerate(d.psu_connections):
            writer.writerow(
                [
                    d.id,
                    d.name,
                    d.room,
                    "" if d.u_position is None else d.u_position,
                    d.u_height,
                    i + 1,
                    conn.pdu_id if conn else "",
                    "" if conn is None else conn.socket_index + 1,
                ]
            )
    p.write_text(buf.getvalue(), encoding="utf-8")
    return p
