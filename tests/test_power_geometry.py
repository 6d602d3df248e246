"""
Tests for rack elevation geometry used by nearest-socket selection.
"""

import pytest
from rackfeed_tools.power.geometry import device_center_y, pdu_height_px, rack_height_px, socket_y


class TestGeometry:
    def test_rack_height(self):
        assert rack_height_px(48) == 48 * 30 + 32

    def test_device_center(self):
        # top-most U of a 48U rack sits directly under the header
        assert device_center_y(48, 1, 48) == 31
        assert device_center_y(48, 2, 48) == 46
        assert device_center_y(1, 1, 48) == 16 + 47 * 30 + 15

    def test_pdu_height(self):
        assert pdu_height_px(24) == 40 + 8 + 24 * 14 + 23 * 4 + 8 + 40
        assert pdu_height_px(24, 2) == pdu_height_px(12)

    def test_socket_y_increases_down_the_strip(self):
        ys = [socket_y(0, s, 1, 24, 48) for s in range(24)]
        assert ys == sorted(ys)
        assert ys[1] - ys[0] == pytest.approx(18)

    def test_socket_columns_share_a_row(self):
        assert socket_y(0, 0, 1, 24, 48, pdu_cols=2) == socket_y(0, 1, 1, 24, 48, pdu_cols=2)
        assert socket_y(0, 2, 1, 24, 48, pdu_cols=2) > socket_y(0, 1, 1, 24, 48, pdu_cols=2)

    def test_pdus_stack_in_pair_order(self):
        assert socket_y(1, 0, 2, 24, 48) > socket_y(0, 23, 2, 24, 48)

    def test_column_centered_on_rack(self):
        single = pdu_height_px(24)
        start = (rack_height_px(48) - single) / 2
        assert socket_y(0, 0, 1, 24, 48) == start + 40 + 8 + 7

    def test_oversized_group_starts_at_top(self):
        # ten pairs are taller than the rack; the column is pinned at y=0
        assert socket_y(0, 0, 10, 24, 48) == 40 + 8 + 7
