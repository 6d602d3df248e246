from __future__ import annotations

# ----------------------------
# Unit conversions
# ----------------------------


def margin_fraction(safety_margin: float) -> float:
    """Safety margin percentage (0-100) as a multiplier."""
    return safety_margin / 100


def effective_capacity(capacity_va: float, power_factor: float, safety_margin: float) -> float:
    """Usable real power (W) of a PDU rated ``capacity_va``.

    Real power limit = VA x PF, then derated by the safety margin.
    e.g. 32A x 230V = 7360VA, x 0.95 PF x 80% = 5593.6W.
    """
    return capacity_va * power_factor * margin_fraction(safety_margin)


def watts_to_va(watts: float, power_factor: float) -> float:
    return watts / power_factor


def va_to_amps(va: float, voltage: float) -> float:
    return va / voltage


def watts_to_amps(watts: float, power_factor: float, voltage: float) -> float:
    """Current drawn by a real-power load: ``(W / PF) / V``."""
    return va_to_amps(watts_to_va(watts, power_factor), voltage)


def effective_circuit_amps(rated_amps: float, safety_margin: float) -> float:
    """Breaker rating derated by the safety margin."""
    return rated_amps * margin_fraction(safety_margin)
