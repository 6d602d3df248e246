"""
Tests for per-PDU socket compaction.
"""

from rackfeed_core.models.device import Connection, Device
from rackfeed_tools.power.compaction import compact_wiring


def _wired(device_id: str, u: int | None, *conns, height: int = 1) -> Device:
    d = Device(id=device_id, name=device_id, psu_count=len(conns), u_height=height, u_position=u)
    return d.with_connections([Connection(pdu_id=p, socket_index=s) if p else None for p, s in conns])


def _sockets(devices, pdu_id):
    return {
        (d.id, i): c.socket_index
        for d in devices
        for i, c in enumerate(d.psu_connections)
        if c is not None and c.pdu_id == pdu_id
    }


class TestCompactWiring:
    def test_higher_device_takes_lower_socket(self):
        devices = [_wired("low", 10, ("A1", 2)), _wired("high", 40, ("A1", 5))]
        compacted = compact_wiring(devices, 20)
        assert _sockets(compacted, "A1") == {("high", 0): 2, ("low", 0): 5}

    def test_occupied_indices_and_pdus_unchanged(self):
        devices = [
            _wired("a", 5, ("A1", 0), ("B1", 7)),
            _wired("b", 30, ("A1", 3), ("B1", 1)),
            _wired("c", 20, ("A2", 4)),
        ]
        compacted = compact_wiring(devices, 20)
        for pdu in ("A1", "B1", "A2"):
            assert sorted(_sockets(compacted, pdu).values()) == sorted(_sockets(devices, pdu).values())
        for before, after in zip(devices, compacted):
            assert [c.pdu_id if c else None for c in before.psu_connections] == [
                c.pdu_id if c else None for c in after.psu_connections
            ]

    def test_zones_are_ranked_separately(self):
        devices = [
            _wired("c13-low", 5, ("A1", 1)),
            _wired("c19-low", 4, ("A1", 20)),
            _wired("c19-high", 45, ("A1", 22)),
            _wired("c13-high", 40, ("A1", 9)),
        ]
        compacted = compact_wiring(devices, 20)
        assert _sockets(compacted, "A1") == {
            ("c13-high", 0): 1,
            ("c13-low", 0): 9,
            ("c19-high", 0): 20,
            ("c19-low", 0): 22,
        }

    def test_same_height_ties_keep_socket_order(self):
        devices = [_wired("x", 10, ("A1", 6), ("A1", 3))]
        compacted = compact_wiring(devices, 20)
        assert compacted[0].psu_connections == devices[0].psu_connections

    def test_unplaced_and_unconnected_left_alone(self):
        loose = _wired("loose", None, ("A1", 0))
        empty = _wired("empty", 48, (None, None))
        devices = [loose, empty, _wired("placed", 20, ("A1", 4))]
        compacted = compact_wiring(devices, 20)
        assert compacted[0] is loose
        assert compacted[1] is empty
        assert compacted[2].psu_connections[0].socket_index == 4

    def test_idempotent(self):
        devices = [
            _wired("a", 3, ("A1", 0), ("B1", 0)),
            _wired("b", 33, ("A1", 8), ("B1", 2)),
            _wired("c", 18, ("A1", 4), ("B1", 21)),
        ]
        once = compact_wiring(devices, 20)
        assert compact_wiring(once, 20) == once

    def test_sockets_stay_on_their_circuit(self):
        devices = [_wired("low", 10, ("A1", 2)), _wired("high", 40, ("A1", 13))]
        assert compact_wiring(devices, 20, sockets_per_circuit=12) == devices
        assert _sockets(compact_wiring(devices, 20), "A1") == {("high", 0): 2, ("low", 0): 13}

    def test_ranked_within_each_circuit(self):
        devices = [
            _wired("c0-low", 5, ("A1", 1)),
            _wired("c0-high", 30, ("A1", 4)),
            _wired("c1-low", 10, ("A1", 8)),
            _wired("c1-high", 40, ("A1", 11)),
        ]
        compacted = compact_wiring(devices, 20, sockets_per_circuit=6)
        assert _sockets(compacted, "A1") == {
            ("c0-high", 0): 1,
            ("c0-low", 0): 4,
            ("c1-high", 0): 8,
            ("c1-low", 0): 11,
        }
