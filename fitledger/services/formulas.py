"""Estimated one-repetition maximum formulas.

All functions are pure. The only precondition is Brzycki's rep bound: the
formula diverges as reps approach 37, so callers must keep ``reps < 37``.
Violations raise ``ValueError`` instead of being clamped.
"""

from fitledger.enums import OneRepMaxMethod

BRZYCKI_REP_LIMIT = 37


def epley(weight: float, reps: int) -> float:
    return weight * (1 + reps / 30)


def brzycki(weight: float, reps: int) -> float:
    if reps >= BRZYCKI_REP_LIMIT:
        raise ValueError(f"Brzycki is undefined for reps >= {BRZYCKI_REP_LIMIT} (got {reps})")
    return weight * 36 / (BRZYCKI_REP_LIMIT - reps)


def lombardi(weight: float, reps: int) -> float:
    return weight * reps**0.10


def mcglothin(weight: float, reps: int) -> float:
    return 100 * weight / (101.3 - 2.67123 * reps)


_FORMULAS = {
    OneRepMaxMethod.EPLEY: epley,
    OneRepMaxMethod.BRZYCKI: brzycki,
    OneRepMaxMethod.LOMBARDI: lombardi,
    OneRepMaxMethod.MCGLOTHIN: mcglothin,
}


def estimate(weight: float, reps: int, method: OneRepMaxMethod = OneRepMaxMethod.EPLEY) -> float:
    """Estimate the 1RM for ``weight`` lifted ``reps`` times using ``method``."""
    return _FORMULAS[OneRepMaxMethod(method)](weight, reps)


def estimate_all(weight: float, reps: int) -> dict[OneRepMaxMethod, float]:
    """Every method's estimate, leaving out Brzycki when reps are outside its domain."""
    results: dict[OneRepMaxMethod, float] = {}
    for method, formula in _FORMULAS.items():
        if method is OneRepMaxMethod.BRZYCKI and reps >= BRZYCKI_REP_LIMIT:
            continue
        results[method] = formula(weight, reps)
    return results
