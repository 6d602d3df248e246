"""
Tests for PDU, pair and circuit load aggregation.
"""

import pytest
from rackfeed_core.data.plan import update_config
from rackfeed_core.models.device import Connection, Device
from rackfeed_tools.power.loads import calculate_circuit_loads, calculate_pair_loads, calculate_pdu_loads
from rackfeed_tools.power.sizing import build_pdus


def _on(device_id: str, watts: float, typical: float, *conns) -> Device:
    d = Device(id=device_id, name=device_id, psu_count=len(conns), power_rating=watts, typical_power=typical)
    return d.with_connections([Connection(pdu_id=p, socket_index=s) if p else None for p, s in conns])


class TestPduLoads:
    def test_dual_feed_reserves_full_max_on_each_side(self, config):
        pdus = build_pdus(config, 1)
        loads = calculate_pdu_loads([_on("srv", 1000, 600, ("A1", 0), ("B1", 0))], pdus)
        assert loads["A1"].max == 1000
        assert loads["B1"].max == 1000
        assert loads["A1"].typical == pytest.approx(300)
        assert loads["B1"].typical == pytest.approx(300)

    def test_two_psus_on_one_pdu_count_once(self, config):
        pdus = build_pdus(config, 1)
        loads = calculate_pdu_loads([_on("srv", 1000, 600, ("A1", 0), ("A1", 1))], pdus)
        assert loads["A1"].max == 1000
        assert loads["A1"].typical == 600
        assert loads["B1"].max == 0

    def test_unconnected_and_unknown_pdus_ignored(self, config):
        pdus = build_pdus(config, 1)
        devices = [_on("idle", 500, 300, (None, None)), _on("ghost", 500, 300, ("A7", 0))]
        loads = calculate_pdu_loads(devices, pdus)
        assert set(loads) == {"A1", "B1"}
        assert all(load.max == 0 for load in loads.values())

    def test_pair_loads(self, config):
        pdus = build_pdus(config, 2)
        devices = [_on("a", 400, 200, ("A1", 0)), _on("b", 900, 500, ("B2", 3), ("A2", 3))]
        pairs = calculate_pair_loads(pdus, calculate_pdu_loads(devices, pdus))
        assert pairs == {0: {"A": 400, "B": 0}, 1: {"A": 900, "B": 900}}


class TestCircuitLoads:
    def test_single_circuit(self, config):
        pdus = build_pdus(config, 1)
        circuits = calculate_circuit_loads([_on("a", 950, 500, ("A1", 0))], pdus, config)
        assert len(circuits) == 2
        a1 = next(c for c in circuits if c.pdu_id == "A1")
        assert a1.watts == 950
        assert a1.amps == pytest.approx(1000 / 230)
        assert a1.limit_amps == pytest.approx(25.6)

    def test_sockets_split_evenly_across_circuits(self, config):
        split = update_config(config, circuit_count=2)
        pdus = build_pdus(split, 1)
        devices = [_on("a", 1000, 500, ("A1", 11)), _on("b", 2000, 500, ("A1", 12))]
        circuits = {(c.pdu_id, c.circuit_index): c for c in calculate_circuit_loads(devices, pdus, split)}
        assert len(circuits) == 4
        assert circuits[("A1", 0)].watts == 1000
        assert circuits[("A1", 1)].watts == 2000
        assert circuits[("B1", 0)].watts == 0

    def test_utilization(self, config):
        pdus = build_pdus(config, 1)
        circuits = calculate_circuit_loads([_on("a", 950, 500, ("A1", 0))], pdus, config)
        a1 = next(c for c in circuits if c.pdu_id == "A1")
        assert a1.utilization == pytest.approx((1000 / 230) / 25.6)
