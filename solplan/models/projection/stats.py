# solplan/models/projection/stats.py
from __future__ import annotations

import math
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

NormalSource = Callable[[], float]

PRICE_FLOOR = 0.01


# ---------- random sources ----------

def box_muller(u1: float, u2: float) -> float:
    """Standard-normal sample from two uniforms in (0, 1]."""
    return math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)


def default_normal_source(seed: Optional[int] = None) -> NormalSource:
    """
    Box–Muller over a numpy Generator. Unseeded unless a seed is given, so
    production runs are not reproducible; tests pass a seed.
    """
    rng = np.random.default_rng(seed)

    def _next() -> float:
        u1 = 0.0
        while u1 == 0.0:  # log(0)
            u1 = float(rng.random())
        u2 = float(rng.random())
        return box_muller(u1, u2)

    return _next


def lognormal_shock(volatility: float, z: float) -> float:
    """exp(σZ - σ²/2): multiplicative noise whose expectation is 1."""
    return math.exp(volatility * z - 0.5 * volatility * volatility)


# ---------- percentiles ----------

def percentile(values: Sequence[float], p: float) -> float:
    """
    Linear interpolation between order statistics:
      index = p/100 * (n-1), blend floor(index) and ceil(index).
    numpy's default 'linear' method is exactly this rule.
    """
    if len(values) == 0:
        raise ValueError("percentile of an empty sample")
    return float(np.percentile(np.asarray(values, dtype=float), p, method="linear"))


def percentile_bands(matrix: np.ndarray, with_mean: bool = True) -> Dict[str, List[float]]:
    """Column-wise p10/p50/p90 (and mean) of a (simulations x steps) matrix."""
    out: Dict[str, List[float]] = {
        "p10": np.percentile(matrix, 10, axis=0, method="linear").tolist(),
        "p50": np.percentile(matrix, 50, axis=0, method="linear").tolist(),
        "p90": np.percentile(matrix, 90, axis=0, method="linear").tolist(),
    }
    if with_mean:
        out["mean"] = matrix.mean(axis=0).tolist()
    return out
