import math
from typing import Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

SocketType = Literal["UK", "C13", "C19"]
Side = Literal["A", "B"]

# Nameplate presets (VA) offered for a PDU
PDU_VARIANTS: list[dict[str, str | int]] = [
    {"name": "Standard 16A (3.6kW)", "power": 3680},
    {"name": "Standard 32A (7.3kW)", "power": 7360},
    {"name": "High Density 63A (14.4kW)", "power": 14400},
    {"name": "3-Phase 16A (11kW)", "power": 11000},
    {"name": "3-Phase 32A (22kW)", "power": 22000},
]


class PduConfig(BaseModel):
    """One side of a redundant PDU pair, regenerated whenever the planner config changes.

    Socket indices ``[0, socket_count)`` form the primary zone, the following
    ``secondary_socket_count`` indices form the secondary zone.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)
    id: str  # e.g. 'A1', 'B3'
    side: Side
    index: int = Field(ge=0)  # pair index, 0-based
    socket_type: SocketType
    socket_count: int = Field(ge=0)
    secondary_socket_type: Optional[SocketType] = None
    secondary_socket_count: int = Field(default=0, ge=0)
    power_capacity: float = Field(gt=0)  # nameplate VA

    @property
    def total_sockets(self) -> int:
        return self.socket_count + self.secondary_socket_count

    def is_secondary(self, socket_index: int) -> bool:
        return socket_index >= self.socket_count

    def zone_type(self, socket_index: int) -> Optional[SocketType]:
        """Connector type of the zone holding ``socket_index``, None when out of range."""
        if socket_index < 0 or socket_index >= self.total_sockets:
            return None
        if self.is_secondary(socket_index):
            return self.secondary_socket_type
        return self.socket_type


class PlannerConfig(BaseModel):
    """Configuration bundle shared by sizing, wiring and validation.

    Every field is range-checked on construction; anything outside
    them is rejected before any state is touched.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    base_pdu_capacity: float = Field(
        default=7360, gt=0, validation_alias=AliasChoices("base_pdu_capacity", "basePduCapacity")
    )
    safety_margin: float = Field(
        default=80, gt=0, le=100, validation_alias=AliasChoices("safety_margin", "safetyMargin")
    )
    power_factor: float = Field(
        default=0.95, gt=0, le=1, validation_alias=AliasChoices("power_factor", "powerFactor")
    )
    socket_type: SocketType = Field(default="C13", validation_alias=AliasChoices("socket_type", "socketType"))
    secondary_socket_type: SocketType = Field(
        default="C19", validation_alias=AliasChoices("secondary_socket_type", "secondarySocketType")
    )
    base_sockets_per_pdu: int = Field(
        default=20, ge=1, le=100, validation_alias=AliasChoices("base_sockets_per_pdu", "baseSocketsPerPDU")
    )
    secondary_sockets_per_pdu: int = Field(
        default=4, ge=0, le=16, validation_alias=AliasChoices("secondary_sockets_per_pdu", "secondarySocketsPerPDU")
    )
    voltage: float = Field(default=230, ge=100, le=480, validation_alias=AliasChoices("voltage", "pduVoltage"))
    circuit_count: int = Field(
        default=1, ge=1, le=6, validation_alias=AliasChoices("circuit_count", "pduCircuitCount")
    )
    circuit_rated_amps: float = Field(
        default=32, ge=1, le=63, validation_alias=AliasChoices("circuit_rated_amps", "pduCircuitAmps")
    )
    rack_size: int = Field(default=48, ge=4, le=52, validation_alias=AliasChoices("rack_size", "rackSize"))
    pdu_cols: int = Field(default=1, ge=1, le=4, validation_alias=AliasChoices("pdu_cols", "pduCols"))
    manual_pdu_pairs: Optional[int] = Field(
        default=None, ge=1, validation_alias=AliasChoices("manual_pdu_pairs", "manualPduPairs")
    )

    @field_validator("base_sockets_per_pdu", "secondary_sockets_per_pdu", "circuit_count", "rack_size", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        # fractional counts are floored, not rejected
        return int(math.floor(float(v)))

    @property
    def effective_capacity(self) -> float:
        """Usable watts per PDU: nameplate VA x power factor x safety margin."""
        return self.base_pdu_capacity * self.power_factor * (self.safety_margin / 100)

    @property
    def total_sockets_per_pdu(self) -> int:
        return self.base_sockets_per_pdu + self.secondary_sockets_per_pdu

    @property
    def sockets_per_circuit(self) -> int:
        return math.ceil(self.total_sockets_per_pdu / self.circuit_count)

    @property
    def effective_circuit_amps(self) -> float:
        return self.circuit_rated_amps * (self.safety_margin / 100)

    @property
    def variant_name(self) -> Optional[str]:
        """Name of the preset matching ``base_pdu_capacity``, None for a custom rating."""
        return next((str(v["name"]) for v in PDU_VARIANTS if v["power"] == self.base_pdu_capacity), None)

    @property
    def is_three_phase(self) -> bool:
        return "3-Phase" in (self.variant_name or "")
