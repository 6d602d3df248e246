"""
Tests for PDU pair sizing and PDU materialization.
"""

import pytest
from rackfeed_core.data.plan import update_config
from rackfeed_core.models.device import Device
from rackfeed_tools.power.sizing import (
    build_pdus,
    calculate_pdu_pairs,
    required_pdu_pairs,
    resolve_pair_count,
)
from rackfeed_tools.power.units import (
    effective_capacity,
    effective_circuit_amps,
    watts_to_amps,
    watts_to_va,
)


class TestUnits:
    def test_effective_capacity(self):
        """32A x 230V PDU at PF 0.95 and 80% margin."""
        assert effective_capacity(7360, 0.95, 80) == pytest.approx(5593.6)
        assert effective_capacity(2000, 1.0, 100) == 2000

    def test_watts_to_amps(self):
        assert watts_to_va(950, 0.95) == pytest.approx(1000)
        assert watts_to_amps(2300, 1.0, 230) == pytest.approx(10.0)
        assert watts_to_amps(950, 0.95, 230) == pytest.approx(1000 / 230)

    def test_effective_circuit_amps(self):
        assert effective_circuit_amps(32, 80) == pytest.approx(25.6)


class TestCalculatePduPairs:
    def test_single_small_device(self):
        """One 600W single-PSU device fits a single pair."""
        assert calculate_pdu_pairs(600, 1, 7360, 0.95, 80, 20, 4) == 1

    def test_no_load_still_one_pair(self):
        assert calculate_pdu_pairs(0, 0, 7360, 0.95, 80, 20, 4) == 1

    def test_power_driven(self):
        # 12000 / 5593.6 = 2.15
        assert calculate_pdu_pairs(12000, 4, 7360, 0.95, 80, 20, 4) == 3

    def test_socket_driven(self):
        # 100 PSUs -> 50 per side over 24 sockets
        assert calculate_pdu_pairs(1000, 100, 7360, 0.95, 80, 20, 4) == 3

    def test_exact_fit_does_not_round_up(self):
        assert calculate_pdu_pairs(2000, 2, 2000, 1.0, 100, 2) == 1
        assert calculate_pdu_pairs(2000.5, 2, 2000, 1.0, 100, 2) == 2

    @pytest.mark.parametrize("power,psus", [(0, 1), (5000, 10), (30000, 7), (800, 300)])
    def test_result_covers_both_bounds(self, power, psus):
        pairs = calculate_pdu_pairs(power, psus, 7360, 0.95, 80, 20, 4)
        assert pairs >= 1
        assert pairs * effective_capacity(7360, 0.95, 80) >= power
        assert pairs * 24 >= psus / 2


class TestRequiredPairs:
    def test_scenario_single_device(self, config):
        device = Device(id="d1", name="Switch", psu_count=1, power_rating=600, typical_power=360)
        assert config.effective_capacity == pytest.approx(5593.6)
        assert required_pdu_pairs([device], config) == 1

    def test_manual_override_wins(self, config):
        device = Device(id="d1", name="Switch", power_rating=600)
        manual = update_config(config, manual_pdu_pairs=3)
        assert required_pdu_pairs([device], manual) == 1
        assert resolve_pair_count([device], manual) == 3
        assert resolve_pair_count([device], config) == 1


class TestBuildPdus:
    def test_order_and_ids(self, config):
        pdus = build_pdus(config, 3)
        assert [p.id for p in pdus] == ["A1", "B1", "A2", "B2", "A3", "B3"]
        assert [p.index for p in pdus] == [0, 0, 1, 1, 2, 2]

    def test_zones_follow_config(self, config):
        pdu = build_pdus(config, 1)[0]
        assert pdu.total_sockets == 24
        assert pdu.zone_type(0) == "C13"
        assert pdu.zone_type(19) == "C13"
        assert pdu.zone_type(20) == "C19"
        assert pdu.zone_type(23) == "C19"
        assert pdu.zone_type(24) is None
        assert pdu.zone_type(-1) is None
        assert pdu.power_capacity == 7360

    def test_zero_pairs_builds_one(self, config):
        assert len(build_pdus(config, 0)) == 2
