# rls.state.py
#
#       Plain data-transfer representation of an RLS filter, used for
#       checkpointing the estimator outside of its in-memory layout.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

import numpy as np

from pyrlsfiltering._utils.validation import DimensionMismatchError, as_float_dtype


@dataclass(eq=False)
class RLSState:
    """Snapshot of the five persistent fields of an :class:`RLS` filter.

    The filter length ``n`` is implicit in the array dimensions. Scratch
    buffers are not part of the state; they are rebuilt on restore.

    Attributes
    ----------
    inverse_forgetting_factor : float
        ``1 / lambda``.
    gain : ndarray, shape ``(n,)``
        Gain vector of the last update.
    inverse_correlation : ndarray, shape ``(n, n)``
        Inverse correlation matrix ``P``.
    weight : ndarray, shape ``(n,)``
        Tap weight vector ``w``.
    prior_error : float
        A priori error of the last update.
    formulation : str
        Update formulation, ``"canonical"`` or ``"accumulated"``.
    dtype : str
        Working precision name, ``"float32"`` or ``"float64"``.
    initialization_factor : float, optional
        ``delta`` used to seed ``P``; only needed to reset a restored filter.
    """

    inverse_forgetting_factor: float
    gain: np.ndarray
    inverse_correlation: np.ndarray
    weight: np.ndarray
    prior_error: float
    formulation: str = "canonical"
    dtype: str = "float64"
    initialization_factor: Optional[float] = None

    def __post_init__(self) -> None:
        dt = as_float_dtype(self.dtype)
        self.dtype = dt.name
        self.gain = np.array(self.gain, dtype=dt)
        self.inverse_correlation = np.array(self.inverse_correlation, dtype=dt)
        self.weight = np.array(self.weight, dtype=dt)
        self.inverse_forgetting_factor = dt.type(self.inverse_forgetting_factor)
        self.prior_error = dt.type(self.prior_error)
        self._check_shapes()

    @property
    def n_coeffs(self) -> int:
        return int(self.weight.shape[0]) if self.weight.ndim == 1 else 0

    def _check_shapes(self) -> None:
        if self.weight.ndim != 1:
            raise DimensionMismatchError(
                f"RLSState: weight must be 1-D. Got shape {self.weight.shape}.",
                got=self.weight.shape,
            )
        n = self.n_coeffs
        if self.gain.shape != (n,):
            raise DimensionMismatchError(
                f"RLSState: gain must have shape ({n},). Got {self.gain.shape}.",
                expected=(n,),
                got=self.gain.shape,
            )
        if self.inverse_correlation.shape != (n, n):
            raise DimensionMismatchError(
                f"RLSState: inverse_correlation must have shape ({n}, {n}). "
                f"Got {self.inverse_correlation.shape}.",
                expected=(n, n),
                got=self.inverse_correlation.shape,
            )

    def to_dict(self) -> Dict[str, Any]:
        """JSON-compatible mapping (arrays become nested lists of Python floats)."""
        return {
            "inverse_forgetting_factor": float(self.inverse_forgetting_factor),
            "gain": self.gain.tolist(),
            "inverse_correlation": self.inverse_correlation.tolist(),
            "weight": self.weight.tolist(),
            "prior_error": float(self.prior_error),
            "formulation": str(self.formulation),
            "dtype": str(self.dtype),
            "initialization_factor": (
                None if self.initialization_factor is None else float(self.initialization_factor)
            ),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RLSState":
        """Rebuild a state from the output of :meth:`to_dict`.

        Missing keys raise KeyError; ``formulation`` and ``dtype`` fall back
        to their defaults.
        """
        return cls(
            inverse_forgetting_factor=data["inverse_forgetting_factor"],
            gain=data["gain"],
            inverse_correlation=data["inverse_correlation"],
            weight=data["weight"],
            prior_error=data["prior_error"],
            formulation=data.get("formulation", "canonical"),
            dtype=data.get("dtype", "float64"),
            initialization_factor=data.get("initialization_factor"),
        )


# EOF
