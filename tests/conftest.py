# tests/conftest.py

from __future__ import annotations

import numpy as np
import pytest
from scipy import signal

from pyrlsfiltering.base import OptimizationResult


def _last_coefficients(obj):
    """
    Extract 'final' coefficients from several supported containers.

    Supported:
      - OptimizationResult: uses result.coefficients (last snapshot)
      - np.ndarray/list: returned as-is (assumed final coefficients)
    """
    if isinstance(obj, OptimizationResult):
        coeffs = np.asarray(obj.coefficients)
        if coeffs.size == 0:
            return coeffs
        # (N + 1, n_coeffs) -> last row
        if coeffs.ndim >= 2:
            return coeffs[-1]
        return coeffs

    return np.asarray(obj)


@pytest.fixture
def calculate_msd():
    """
    Mean-square deviation (MSD) between true coefficients and an estimate.

    Accepts w_est as np.ndarray / list (final coefficient vector) or
    OptimizationResult (uses last entry of result.coefficients).
    """
    def _calc(w_true, w_est):
        w_true_flat = np.asarray(w_true).reshape(-1)
        w_hat_flat = np.asarray(_last_coefficients(w_est)).reshape(-1)

        if w_true_flat.shape != w_hat_flat.shape:
            raise ValueError(
                f"MSD shape mismatch: w_true has {w_true_flat.shape}, w_est has {w_hat_flat.shape}"
            )

        return float(np.mean(np.abs(w_true_flat - w_hat_flat) ** 2))

    return _calc


@pytest.fixture
def system_data_real():
    rng = np.random.default_rng(42)
    n_samples = 5000

    w_optimal = np.array([0.4, -0.2, 0.1], dtype=np.float64)
    order = int(len(w_optimal) - 1)

    x = rng.standard_normal(n_samples).astype(np.float64, copy=False)
    d_ideal = signal.lfilter(w_optimal, 1, x).astype(np.float64, copy=False)

    return {
        "x": x,
        "d_ideal": d_ideal,
        "w_optimal": w_optimal,
        "order": order,
        "n_samples": n_samples,
    }


@pytest.fixture
def rls_test_data_real():
    rng = np.random.default_rng(42)
    n_samples = 1000

    w_optimal = np.array([0.5, -0.4, 0.2], dtype=np.float64)
    order = int(len(w_optimal) - 1)

    u = rng.standard_normal(n_samples).astype(np.float64, copy=False)

    # AR(1) colored input
    x = np.zeros(n_samples, dtype=np.float64)
    for i in range(1, n_samples):
        x[i] = 0.9 * x[i - 1] + u[i]

    d = np.convolve(x, w_optimal, mode="full")[:n_samples].astype(np.float64, copy=False)

    return {"x": x, "d": d, "w_optimal": w_optimal, "order": order, "n_samples": n_samples}


@pytest.fixture
def tracking_data_real():
    """Unknown FIR plant that switches coefficients halfway through the record."""
    rng = np.random.default_rng(7)
    n_samples = 2000

    w_first = np.array([0.8, 0.3, -0.2], dtype=np.float64)
    w_second = np.array([-0.5, 0.6, 0.1], dtype=np.float64)
    half = n_samples // 2

    x = rng.standard_normal(n_samples).astype(np.float64, copy=False)
    d = np.empty(n_samples, dtype=np.float64)
    d[:half] = signal.lfilter(w_first, 1, x)[:half]
    d[half:] = signal.lfilter(w_second, 1, x)[half:]
    d += 1e-3 * rng.standard_normal(n_samples)

    return {
        "x": x,
        "d": d,
        "w_first": w_first,
        "w_second": w_second,
        "order": int(len(w_first) - 1),
        "half": half,
    }
