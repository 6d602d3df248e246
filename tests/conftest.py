from pathlib import Path

import pytest
from rackfeed_core.models.power import PlannerConfig

DOCTRINE = Path(__file__).resolve().parents[1] / "doctrine" / "power"


@pytest.fixture
def config():
    """Default planner settings: 7360VA PDUs, 20 C13 + 4 C19 sockets, one 32A circuit."""
    return PlannerConfig()


@pytest.fixture
def inventory_csv():
    """The sample inventory shipped in doctrine/power."""
    return (DOCTRINE / "devices.csv").read_text(encoding="utf-8")
