# ._utils.validation.py

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional, Tuple

import numpy as np

__all__ = [
    "DimensionMismatchError",
    "ensure_real_signals",
    "as_float_dtype",
    "as_vector",
]

_SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


class DimensionMismatchError(ValueError):
    """Raised when an array does not have the shape the filter was built for.

    Attributes
    ----------
    expected:
        Expected shape.
    got:
        Shape actually received.
    """

    def __init__(self, message: str, expected: Optional[Tuple[int, ...]] = None,
                 got: Optional[Tuple[int, ...]] = None) -> None:
        super().__init__(message)
        self.expected = expected
        self.got = got


def ensure_real_signals(func: Callable[..., Any]) -> Callable[..., Any]:
    """Ensure input signals are real-valued.

    Expects the signals already normalized to ``(self, x, d, ...)``, so it is
    stacked below :func:`pyrlsfiltering.base.validate_input`::

        @validate_input
        @ensure_real_signals
        def optimize(self, input_signal, desired_signal, ...): ...

    Raises
    ------
    TypeError:
        If complex data is detected.
    """
    @wraps(func)
    def wrapper(self, x, d, *args, **kwargs):
        if np.iscomplexobj(x):
            raise TypeError(
                f"{self.__class__.__name__} does not support complex inputs for input_signal/x."
            )

        if np.iscomplexobj(d):
            raise TypeError(
                f"{self.__class__.__name__} does not support complex inputs for desired_signal/d."
            )

        return func(self, x, d, *args, **kwargs)

    return wrapper


def as_float_dtype(dtype: Any) -> np.dtype:
    """Normalize `dtype` to float32/float64, raising TypeError otherwise."""
    dt = np.dtype(dtype)
    if dt not in _SUPPORTED_DTYPES:
        raise TypeError(f"Unsupported dtype {dt}; expected float32 or float64.")
    return dt


def as_vector(
    value: Any,
    n: int,
    dtype: np.dtype,
    *,
    name: str = "input_vector",
    owner: str = "filter",
) -> np.ndarray:
    """Cast `value` to a 1-D array of length `n` without copying when possible.

    Raises
    ------
    TypeError:
        If complex data is detected.
    DimensionMismatchError:
        If `value` is not 1-D or its length differs from `n`.
    """
    if np.iscomplexobj(value):
        raise TypeError(f"{owner} does not support complex values for {name}.")

    arr = np.asarray(value, dtype=dtype)
    if arr.ndim != 1 or arr.shape[0] != n:
        raise DimensionMismatchError(
            f"{owner}: {name} must have shape ({n},). Got {arr.shape}.",
            expected=(n,),
            got=arr.shape,
        )
    return arr


#EOF
