from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from rackfeed_core.models.device import Device
from rackfeed_core.models.power import PduConfig, PlannerConfig
from rackfeed_core.models.power_report import Report


class PduLoad(BaseModel):
    """Aggregate load seen by one PDU."""

    model_config = ConfigDict(extra="ignore")
    typical: float = 0.0
    max: float = 0.0


class CircuitLoad(BaseModel):
    model_config = ConfigDict(extra="ignore")
    pdu_id: str
    circuit_index: int
    watts: float
    amps: float
    limit_amps: float

    @property
    def utilization(self) -> float:
        return self.amps / self.limit_amps if self.limit_amps else 0.0


class PduGroup(BaseModel):
    """A capacity-bounded bucket produced by the room-level grouper."""

    model_config = ConfigDict(extra="ignore")
    id: str
    capacity: float
    current_load: float = 0.0
    devices: list[Device] = Field(default_factory=list)


class GroupingResult(BaseModel):
    model_config = ConfigDict(extra="ignore")
    room_id: str
    pdu_pairs: list[PduGroup]
    unassigned_devices: list[Device] = Field(default_factory=list)


class PowerPlan(BaseModel):
    """Everything produced by one planning run for a room."""

    model_config = ConfigDict(extra="ignore")
    config: PlannerConfig
    calculated_pairs: int
    active_pairs: int
    pdus: list[PduConfig]
    devices: list[Device]
    pdu_loads: dict[str, PduLoad]
    circuit_loads: list[CircuitLoad]
    report: Report

    @property
    def unconnected(self) -> list[tuple[Device, int]]:
        return [
            (d, i)
            for d in self.devices
            if d.is_placed
            for i, conn in enumerate(d.psu_connections)
            if conn is None
        ]


class PlanDocument(PlannerConfig):
    """Flat save file: the planner config, the device list and the original inventory text."""

    devices: list[Device] = Field(default_factory=list, validation_alias=AliasChoices("devices", "activeDevices"))
    source_text: Optional[str] = Field(default=None, validation_alias=AliasChoices("source_text", "csvInput"))

    @property
    def config(self) -> PlannerConfig:
        return PlannerConfig.model_validate(self.model_dump(include=set(PlannerConfig.model_fields)))

    @classmethod
    def from_plan(cls, config: PlannerConfig, devices: list[Device], source_text: str | None = None) -> "PlanDocument":
        return cls.model_validate({**config.model_dump(), "devices": devices, "source_text": source_text})
