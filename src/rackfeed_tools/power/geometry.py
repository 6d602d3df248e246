"""Vertical geometry of the rack elevation, used to pick the socket nearest a device.

All values are in drawing units (px) of the rack elevation. Only relative
distances matter, so these match the elevation drawing rather than real
millimetres.
"""

from __future__ import annotations

import math

U_HEIGHT_PX = 30
RACK_HEADER_HEIGHT = 16

PDU_HEADER_H = 40
PDU_FOOTER_H = 40
SOCKET_H = 14
SOCKET_GAP = 4
SOCKET_PADDING = 8
PDU_VERTICAL_GAP = 20


def rack_height_px(rack_size: int) -> float:
    return rack_size * U_HEIGHT_PX + RACK_HEADER_HEIGHT * 2


def device_center_y(u_position: int, u_height: int, rack_size: int) -> float:
    """Y of a device's vertical center; ``u_position`` is its top-most U (U1 at the bottom)."""
    top = RACK_HEADER_HEIGHT + (rack_size - u_position) * U_HEIGHT_PX
    return top + (u_height * U_HEIGHT_PX) / 2


def pdu_height_px(total_sockets: int, pdu_cols: int = 1) -> float:
    rows = math.ceil(total_sockets / pdu_cols)
    content = rows * SOCKET_H + (rows - 1) * SOCKET_GAP
    return PDU_HEADER_H + SOCKET_PADDING + content + SOCKET_PADDING + PDU_FOOTER_H


def socket_y(
    pair_index: int,
    socket_index: int,
    num_pairs: int,
    total_sockets: int,
    rack_size: int,
    pdu_cols: int = 1,
) -> float:
    """Y of a socket's center on PDU ``pair_index`` of a column of ``num_pairs`` PDUs.

    The column is centered on the rack; sockets are laid out in rows of ``pdu_cols``.
    """
    single = pdu_height_px(total_sockets, pdu_cols)
    group = num_pairs * single + (num_pairs - 1) * PDU_VERTICAL_GAP
    start = max(0.0, (rack_height_px(rack_size) - group) / 2)

    pdu_top = start + pair_index * (single + PDU_VERTICAL_GAP)
    row = socket_index // pdu_cols
    return pdu_top + PDU_HEADER_H + SOCKET_PADDING + row * (SOCKET_H + SOCKET_GAP) + SOCKET_H / 2
