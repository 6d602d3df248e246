from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from rackfeed_core.models.power import SocketType


class Connection(BaseModel):
    """A PSU cable plugged into one socket of one PDU."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)
    pdu_id: str = Field(validation_alias=AliasChoices("pdu_id", "pduId"))
    socket_index: int = Field(ge=0, validation_alias=AliasChoices("socket_index", "socketIndex"))


def _first_key(data: dict, *keys: str) -> str | None:
    for key in keys:
        if key in data:
            return key
    return None


class Device(BaseModel):
    """A single rack-mounted unit (one row of the inventory expands to ``qty`` devices).

    ``power_rating`` is the per-unit max power and drives every capacity check.
    ``psu_connections`` always holds exactly ``psu_count`` slots, ``None`` meaning
    the PSU is unconnected.
    """

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    id: str
    name: str
    room: str = "Unknown Room"
    psu_count: int = Field(default=1, ge=1, validation_alias=AliasChoices("psu_count", "psuCount"))
    typical_power: float = Field(default=0.0, ge=0, validation_alias=AliasChoices("typical_power", "typicalPower"))
    power_rating: float = Field(
        default=0.0, ge=0, validation_alias=AliasChoices("power_rating", "powerRatingPerDevice", "max_power")
    )
    connection_type: SocketType = Field(
        default="C13", validation_alias=AliasChoices("connection_type", "connectionType")
    )
    u_height: int = Field(default=1, ge=1, validation_alias=AliasChoices("u_height", "uHeight"))
    u_position: Optional[int] = Field(default=None, ge=1, validation_alias=AliasChoices("u_position", "uPosition"))
    psu_connections: tuple[Optional[Connection], ...] = Field(
        default=(), validation_alias=AliasChoices("psu_connections", "psuConnections")
    )

    @model_validator(mode="before")
    @classmethod
    def _normalize_connections(cls, data: Any) -> Any:
        """Accept the legacy ``{"0": {...}, "1": null}`` map and size the slots to ``psu_count``."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        count_key = _first_key(data, "psu_count", "psuCount")
        try:
            count = max(1, int(data[count_key])) if count_key else 1
        except (TypeError, ValueError):
            # leave it to field validation to report the bad count
            return data

        conn_key = _first_key(data, "psu_connections", "psuConnections") or "psu_connections"
        raw = data.get(conn_key) or ()
        if isinstance(raw, dict):
            slots: list[Any] = [None] * count
            for key, conn in raw.items():
                idx = int(key)
                if 0 <= idx < count:
                    slots[idx] = conn
        else:
            slots = list(raw)[:count]
            slots.extend([None] * (count - len(slots)))
        data[conn_key] = tuple(slots)
        return data

    @field_validator("psu_count", "u_height", mode="before")
    @classmethod
    def _coerce_int(cls, v):
        return int(v)

    @field_validator("connection_type", mode="before")
    @classmethod
    def _normalize_connector(cls, v):
        if isinstance(v, str):
            return v.strip().strip('"').upper()
        return v

    @property
    def is_placed(self) -> bool:
        return self.u_position is not None

    @property
    def u_range(self) -> Optional[tuple[int, int]]:
        """Occupied U slots as ``(bottom, top)``, or None when unplaced."""
        if self.u_position is None:
            return None
        return self.u_position - self.u_height + 1, self.u_position

    @property
    def connected_psus(self) -> int:
        return sum(1 for c in self.psu_connections if c is not None)

    @property
    def pdu_ids(self) -> set[str]:
        return {c.pdu_id for c in self.psu_connections if c is not None}

    def with_connections(self, connections: list[Optional[Connection]] | tuple[Optional[Connection], ...]) -> "Device":
        slots = list(connections)[: self.psu_count]
        slots.extend([None] * (self.psu_count - len(slots)))
        return self.model_copy(update={"psu_connections": tuple(slots)})

    def disconnected(self) -> "Device":
        return self.with_connections(())


class RackGroup(BaseModel):
    """Devices ingested for one room, in inventory order."""

    model_config = ConfigDict(extra="ignore")
    room_id: str
    devices: list[Device] = Field(default_factory=list)
    total_power: float = 0.0
