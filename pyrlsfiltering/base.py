# base.py

from __future__ import annotations

import functools
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from typing import Any, Callable, Dict, Optional, Tuple

import numpy as np

from pyrlsfiltering._utils.typing import ArrayLike


@dataclass
class OptimizationResult:
    """Standard output container for batch adaptation runs.

    Attributes
    ----------
    outputs:
        Estimated output signal y[k] produced by the adaptive filter.
    errors:
        Error signal (definition depends on `error_type`), typically e[k] = d[k] - y[k].
    coefficients:
        Coefficient history over time, shape (N + 1, n_coeffs). Row 0 holds the
        coefficients before the first update.
    algorithm:
        Algorithm name (usually class name).
    runtime_ms:
        Runtime in milliseconds.
    error_type:
        Error semantics tag, e.g. "a_priori", "a_posteriori".
    extra:
        Optional container for internal states / debug info.
    """

    outputs: np.ndarray
    errors: np.ndarray
    coefficients: np.ndarray
    algorithm: str
    runtime_ms: float
    error_type: str = "a_priori"
    extra: Optional[Dict[str, Any]] = None

    def mse(self) -> np.ndarray:
        """Instantaneous squared error."""
        return np.abs(self.errors) ** 2

    @classmethod
    def _field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    def __getitem__(self, key: str) -> Any:
        # result fields first, then the extra dict
        if key in self._field_names():
            return getattr(self, key)
        if self.extra is not None and key in self.extra:
            return self.extra[key]
        raise KeyError(key)

    def __repr__(self) -> str:
        return f"<OptimizationResult algo={self.algorithm} samples={len(self.outputs)}>"


def validate_input(method: Callable[..., Any]) -> Callable[..., Any]:
    """Decorator to validate and normalize `optimize` inputs.

    Accepts all of the following calling styles:

    1) Standard, preferred:
        optimize(input_signal=..., desired_signal=..., **kwargs)
        optimize(input_signal, desired_signal, **kwargs)

    2) Legacy aliases:
        optimize(x=..., d=..., **kwargs)
        optimize(x, d, **kwargs)

    Notes
    -----
    - Signals are converted with `np.asarray` and flattened to 1D (ravel).
    - Length mismatch raises ValueError.
    - dtype is left to the filter, which casts to its own working precision.
    """
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        input_signal = None
        desired_signal = None

        if len(args) >= 1:
            input_signal = args[0]
        if len(args) >= 2:
            desired_signal = args[1]

        if "input_signal" in kwargs:
            input_signal = kwargs.pop("input_signal")
        if "desired_signal" in kwargs:
            desired_signal = kwargs.pop("desired_signal")

        if "x" in kwargs:
            input_signal = kwargs.pop("x")
        if "d" in kwargs:
            desired_signal = kwargs.pop("d")

        if input_signal is None:
            raise TypeError("Missing input signal: pass input_signal (or alias x).")
        if desired_signal is None:
            raise TypeError("Missing desired signal: pass desired_signal (or alias d).")

        x = np.ravel(np.asarray(input_signal))
        d = np.ravel(np.asarray(desired_signal))
        if x.shape[0] != d.shape[0]:
            raise ValueError(
                f"Inconsistent lengths: input({x.shape[0]}) != desired({d.shape[0]})"
            )

        return method(self, x, d, *args[2:], **kwargs)

    return wrapper


class AdaptiveFilter(ABC):
    """Abstract base class for transversal (FIR) adaptive filters.

    Parameters
    ----------
    filter_order:
        Order in the FIR sense (number of taps - 1).
    w_init:
        Initial coefficient vector. If None, initialized to zeros.
    dtype:
        Working floating-point precision of the coefficients.

    Notes
    -----
    - Subclasses should set `supports_complex = True` if they support complex-valued data.
    - No coefficient history is kept between calls; batch methods collect their own
      trajectories and hand them to `_pack_results`.
    """

    supports_complex: bool = False

    def __init__(
        self,
        filter_order: int,
        w_init: Optional[ArrayLike] = None,
        dtype: Any = np.float64,
    ) -> None:
        self.filter_order: int = int(filter_order)
        self._dtype = np.dtype(dtype)

        if w_init is not None:
            self.w: np.ndarray = np.array(w_init, dtype=self._dtype)
        else:
            self.w = np.zeros(self.filter_order + 1, dtype=self._dtype)

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    def _pack_results(
        self,
        outputs: np.ndarray,
        errors: np.ndarray,
        coefficients: np.ndarray,
        runtime_s: float,
        error_type: str = "a_priori",
        extra: Optional[Dict[str, Any]] = None,
    ) -> OptimizationResult:
        """Centralized output packaging to standardize results."""
        return OptimizationResult(
            outputs=np.asarray(outputs),
            errors=np.asarray(errors),
            coefficients=np.asarray(coefficients),
            algorithm=self.__class__.__name__,
            runtime_ms=float(runtime_s) * 1000.0,
            error_type=str(error_type),
            extra=extra,
        )

    def filter_signal(self, input_signal: ArrayLike) -> np.ndarray:
        """Filter an input signal using current coefficients.

        Regressor convention:
            x_k = [x[k], x[k-1], ..., x[k-m]]
        and output:
            y[k] = w^T x_k
        """
        x = np.ravel(np.asarray(input_signal, dtype=self._dtype))
        n_samples = x.size
        y = np.zeros(n_samples, dtype=self._dtype)

        x_padded = np.zeros(n_samples + self.filter_order, dtype=self._dtype)
        x_padded[self.filter_order:] = x

        for k in range(n_samples):
            x_k = x_padded[k : k + self.filter_order + 1][::-1]
            y[k] = np.dot(self.w, x_k)

        return y

    @classmethod
    def default_test_init_kwargs(cls, order: int) -> dict:
        """Override in subclasses to provide init kwargs for standardized tests."""
        return {}

    @abstractmethod
    def update(self, input_vector: ArrayLike, target: float) -> None:
        """Adapt the coefficients with one (regressor, desired sample) pair."""
        raise NotImplementedError

    @abstractmethod
    def optimize(
        self,
        input_signal: ArrayLike,
        desired_signal: ArrayLike,
        **kwargs: Any,
    ) -> OptimizationResult:
        """Run the adaptation procedure over whole signals."""
        raise NotImplementedError

    def reset_filter(self, w_new: Optional[ArrayLike] = None) -> None:
        """Reset coefficients."""
        if w_new is not None:
            self.w = np.array(w_new, dtype=self._dtype)
        else:
            self.w = np.zeros(self.filter_order + 1, dtype=self._dtype)


# EOF
