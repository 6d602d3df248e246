from .power import validate_capacity, validate_connectivity, validate_plan, validate_rack, validate_sockets

__all__ = [
    "validate_capacity",
    "validate_connectivity",
    "validate_plan",
    "validate_rack",
    "validate_sockets",
]
