"""
End-to-end planning of the sample inventory.
"""

import logging

import pytest
from rackfeed_core.data.devices import parse_device_csv
from rackfeed_core.data.plan import update_config
from rackfeed_tools.power.planner import plan_room
from rackfeed_tools.power.sizing import build_pdus


@pytest.fixture
def room(inventory_csv):
    return parse_device_csv(inventory_csv)[0]


class TestPlanRoom:
    def test_sample_inventory(self, room, config):
        plan = plan_room(room.devices, config, restack=True)
        assert plan.calculated_pairs == 3
        assert plan.active_pairs == 3
        assert [p.id for p in plan.pdus] == ["A1", "B1", "A2", "B2", "A3", "B3"]
        assert [d.id for d in plan.devices] == [d.id for d in room.devices]
        assert all(d.is_placed for d in plan.devices)
        assert not plan.report.has_failures

    def test_sample_inventory_leaves_one_server_unwired(self, room, config):
        # 16.4kW on 3 x 5.6kW pairs fragments; the last 1.6kW server finds no pair with room
        plan = plan_room(room.devices, config, restack=True)
        unconnected = plan.unconnected
        assert [(d.name, psu) for d, psu in unconnected] == [
            ("HPE ProLiant DL380 Gen10", 0),
            ("HPE ProLiant DL380 Gen10", 1),
        ]
        assert plan.report.summary["psus_connected"] == 39
        assert len(plan.report.by_code("PSU_UNCONNECTED")) == 2

    def test_manual_pairs_wire_everything(self, room, config):
        plan = plan_room(room.devices, update_config(config, manual_pdu_pairs=4), restack=True)
        assert plan.calculated_pairs == 3
        assert plan.active_pairs == 4
        assert len(plan.pdus) == 8
        assert plan.unconnected == []

    def test_loads_within_limits(self, room, config):
        plan = plan_room(room.devices, config, restack=True)
        for load in plan.pdu_loads.values():
            assert load.max <= config.effective_capacity
        for circuit in plan.circuit_loads:
            assert circuit.amps <= circuit.limit_amps

    def test_without_restack_keeps_positions(self, room, config):
        placed = plan_room(room.devices, config, restack=True).devices
        moved = placed[:-1] + [placed[-1].model_copy(update={"u_position": 10})]
        plan = plan_room(moved, config)
        assert plan.devices[-1].name == "1U KVM Console"
        assert plan.devices[-1].u_position == 10
        assert plan.devices[-1].connected_psus == 1
        assert [d.u_position for d in plan.devices[:-1]] == [d.u_position for d in placed[:-1]]

    def test_unplaced_room_is_warned_not_wired(self, room, config):
        plan = plan_room(room.devices, config)
        assert all(d.connected_psus == 0 for d in plan.devices)
        assert len(plan.report.by_code("DEVICE_UNPLACED")) == len(room.devices)
        assert plan.unconnected == []


class TestSpyTrace:
    def test_spy_logs_entry_and_exit(self, monkeypatch, caplog, config):
        monkeypatch.setenv("RACKFEED_SPY", "1")
        with caplog.at_level(logging.DEBUG, logger="rackfeed.spy"):
            build_pdus(config, 1)
        assert "Entering build_pdus" in caplog.text
        assert "Exiting build_pdus" in caplog.text

    def test_spy_silent_by_default(self, monkeypatch, caplog, config):
        monkeypatch.delenv("RACKFEED_SPY", raising=False)
        with caplog.at_level(logging.DEBUG, logger="rackfeed.spy"):
            build_pdus(config, 1)
        assert "Entering" not in caplog.text
