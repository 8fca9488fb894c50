# pyrlsfiltering/_utils/system_id.py
from __future__ import annotations

from dataclasses import dataclass
from time import perf_counter
from typing import Tuple

import numpy as np


# =============================================================================
# Data generation (System ID)
# =============================================================================

def generate_sign_input(rng: np.random.Generator, K: int) -> np.ndarray:
    """MATLAB-like: x = sign(randn(K,1)). Returns float array shape (K,)."""
    x = np.sign(rng.standard_normal(K)).astype(float)
    # exact zeros are mapped to 1 to keep the sequence binary
    x[x == 0.0] = 1.0
    return x


def tapped_delay_matrix(x: np.ndarray, n_coeffs: int) -> np.ndarray:
    """
    Tapped delay line regressors, shape (K, n_coeffs).

    Row k is [x[k], x[k-1], ..., x[k-n_coeffs+1]] (most recent first), with
    zeros before the start of the signal.
    """
    x = np.asarray(x, dtype=float).ravel()
    K = int(x.size)
    M = int(n_coeffs) - 1

    x_pad = np.concatenate((np.zeros(M, dtype=float), x))
    X = np.zeros((K, M + 1), dtype=float)
    for k in range(K):
        X[k, :] = x_pad[k : k + (M + 1)][::-1]
    return X


def build_desired_from_fir(
    x: np.ndarray,
    Wo: np.ndarray,
    sigma_n2: float,
    rng: np.random.Generator,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Desired signal for FIR unknown system:
      d[k] = Wo^T * X_k + n[k]
    where X_k is tapped delay line with length len(Wo), most recent first.

    Returns:
      d: (K,) float
      n: (K,) float
    """
    Wo = np.asarray(Wo, dtype=float).ravel()
    X = tapped_delay_matrix(x, Wo.size)
    K = int(X.shape[0])

    n = (np.sqrt(float(sigma_n2)) * rng.standard_normal(K)).astype(float)
    d = X @ Wo + n

    return d, n


# =============================================================================
# Progress
# =============================================================================

@dataclass
class ProgressConfig:
    verbose_progress: bool = True
    print_every: int = 10
    tail_window: int = 50


def report_progress(
    *,
    l: int,
    ensemble: int,
    t0: float,
    t_real0: float,
    mse_col: np.ndarray,
    cfg: ProgressConfig,
) -> None:
    """Print ensemble progress + tail MSE in dB."""
    if not cfg.verbose_progress:
        return

    if not (((l + 1) % cfg.print_every == 0) or ((l + 1) == ensemble)):
        return

    t_real1 = perf_counter()
    elapsed = t_real1 - t0
    avg_per = elapsed / (l + 1)
    eta = avg_per * (ensemble - (l + 1))

    tail = mse_col[max(0, len(mse_col) - cfg.tail_window) :]
    tail_db = 10.0 * np.log10(float(np.mean(tail)) + 1e-20)

    print(
        f"[Ensemble {l+1:>3}/{ensemble}] "
        f"time={(t_real1 - t_real0)*1e3:7.1f} ms | "
        f"tail_mse={tail_db:7.2f} dB | elapsed={elapsed:6.1f}s | ETA={eta:6.1f}s"
    )


__all__ = [
    "generate_sign_input",
    "tapped_delay_matrix",
    "build_desired_from_fir",
    "ProgressConfig",
    "report_progress",
]
