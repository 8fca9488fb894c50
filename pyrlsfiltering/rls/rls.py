# rls.rls.py
#
#       Implements the exponentially weighted RLS algorithm for REAL valued
#       data as an online estimator: one (regressor, desired sample) pair per
#       call, O(n^2) work per update, no per-update allocation.
#       (Algorithm 5.3 - book: Adaptive Filtering: Algorithms and Practical
#                                          Implementation, Diniz; Haykin,
#                                          Adaptive Filter Theory, ch. 10)

from __future__ import annotations

from time import perf_counter
from typing import Any, Dict, Optional, Union

import numpy as np

from pyrlsfiltering.base import AdaptiveFilter, OptimizationResult, validate_input
from pyrlsfiltering._utils.typing import ArrayLike
from pyrlsfiltering._utils.validation import (
    DimensionMismatchError,
    as_float_dtype,
    as_vector,
    ensure_real_signals,
)
from pyrlsfiltering.rls.state import RLSState

CANONICAL = "canonical"
ACCUMULATED = "accumulated"
FORMULATIONS = (CANONICAL, ACCUMULATED)


def _readonly(arr: np.ndarray) -> np.ndarray:
    view = arr.view()
    view.flags.writeable = False
    return view


class RLS(AdaptiveFilter):
    """
    Recursive Least-Squares (RLS) adaptive filter with exponential forgetting.

    Online estimator of a linear model ``d = w^T u`` from a stream of
    ``(u, d)`` pairs. The filter keeps the tap weight vector ``w`` and the
    inverse correlation matrix ``P`` (the inverse of the exponentially
    weighted input autocorrelation) and refreshes both with a rank-1 matrix
    inversion lemma correction on every call to :meth:`update`.

    Parameters
    ----------
    initialization_factor : float
        ``delta``. The inverse correlation matrix starts as ``(1/delta) I``.
        Haykin recommends ``delta`` below ``0.01 sigma^2`` of the data.
    forgetting_factor : float
        ``lambda`` in ``(0, 1]``. ``lambda = 1`` means no forgetting.
    n_coeffs : int, optional
        Filter length ``n``. The weight vector starts at zero. Either this or
        ``w_init`` must be given.
    w_init : array_like of float, optional
        Initial weight vector; ``n`` is taken from its length.
    dtype : {np.float64, np.float32}, optional (keyword-only)
        Working precision of every buffer. Default is float64.
    formulation : {"canonical", "accumulated"}, optional (keyword-only)
        Update recurrence. Default is ``"canonical"``, see Notes.

    Notes
    -----
    Canonical recurrence (default). For regressor ``u`` and desired sample
    ``d``:

    .. math::
        g &= P u / (\\lambda^{-1} + u^T P u) \\\\
        e &= d - w^T u \\\\
        w &\\leftarrow w + e\\, g \\\\
        P &\\leftarrow \\lambda^{-1} (P - g\\, (P^T u)^T)

    ``e`` is computed with the weight *before* the update and the rank-1
    correction uses ``P`` *before* the update; changing either order yields a
    different filter.

    Accumulated recurrence (``formulation="accumulated"``). A second,
    non-equivalent recurrence kept for compatibility with checkpoints
    produced by it:

    .. math::
        g &\\leftarrow (P u + g) / (\\lambda^{-1} + g^T g) \\\\
        w &\\leftarrow w + e\\, g \\\\
        P &\\leftarrow \\lambda^{-1} (P - \\mathrm{diag}(g)\\, \\mathbf{1} u^T P)

    with ``P`` seeded as a matrix filled with ``1/delta`` instead of
    ``(1/delta) I``. It does not compute the least-squares solution and
    should not be used for new work.

    Preconditions ``n >= 1``, ``delta != 0`` and ``lambda != 0`` are not
    checked. Degenerate values or inputs propagate NaN/Inf into ``w`` and
    ``P`` following IEEE-754 semantics. ``P`` is not re-symmetrized, so long
    runs with ``lambda < 1`` can drift from symmetry.

    An instance must not be updated from more than one thread at a time.

    References
    ----------
    .. [1] P. S. R. Diniz, *Adaptive Filtering: Algorithms and Practical
       Implementation*, 5th ed., Algorithm 5.3.
    .. [2] S. Haykin, *Adaptive Filter Theory*, 5th ed., Section 10.
    """

    supports_complex: bool = False

    initialization_factor: Optional[np.floating]
    forgetting_factor: np.floating
    n_coeffs: int

    def __init__(
        self,
        initialization_factor: float,
        forgetting_factor: float,
        n_coeffs: Optional[int] = None,
        w_init: Optional[ArrayLike] = None,
        *,
        dtype: Any = np.float64,
        formulation: str = CANONICAL,
    ) -> None:
        dt = as_float_dtype(dtype)
        if formulation not in FORMULATIONS:
            raise ValueError(
                f"Unknown formulation {formulation!r}; expected one of {FORMULATIONS}."
            )

        if w_init is not None:
            if np.iscomplexobj(w_init):
                raise TypeError(f"{self.__class__.__name__} does not support complex w_init.")
            w0 = np.asarray(w_init, dtype=dt)
            if w0.ndim != 1:
                raise DimensionMismatchError(
                    f"{self.__class__.__name__}: w_init must be 1-D. Got shape {w0.shape}.",
                    got=w0.shape,
                )
            if n_coeffs is not None and int(n_coeffs) != w0.shape[0]:
                raise DimensionMismatchError(
                    f"{self.__class__.__name__}: n_coeffs={int(n_coeffs)} does not match "
                    f"len(w_init)={w0.shape[0]}.",
                    expected=(int(n_coeffs),),
                    got=w0.shape,
                )
            n = int(w0.shape[0])
        elif n_coeffs is not None:
            w0 = None
            n = int(n_coeffs)
        else:
            raise TypeError(f"{self.__class__.__name__}: pass either n_coeffs or w_init.")

        super().__init__(filter_order=n - 1, w_init=w0, dtype=dt)

        self.n_coeffs = n
        self._formulation = formulation
        self.initialization_factor = dt.type(initialization_factor)
        self.forgetting_factor = dt.type(forgetting_factor)
        self._inverse_forgetting_factor = dt.type(1) / self.forgetting_factor

        self._allocate()

    @classmethod
    def with_weight(
        cls,
        initialization_factor: float,
        forgetting_factor: float,
        w_init: ArrayLike,
        **kwargs: Any,
    ) -> "RLS":
        """Build a filter whose length and starting weight come from ``w_init``."""
        return cls(initialization_factor, forgetting_factor, w_init=w_init, **kwargs)

    @classmethod
    def default_test_init_kwargs(cls, order: int) -> dict:
        return {"initialization_factor": 1e-2, "forgetting_factor": 0.99, "n_coeffs": order + 1}

    def _allocate(self) -> None:
        """(Re)create gain, P and the scratch buffers for the current length."""
        n = self.n_coeffs
        dt = self._dtype

        self._gain = np.zeros(n, dtype=dt)
        self._prior_error = dt.type(0)
        self._inverse_correlation = self._seed_inverse_correlation()

        self._temp_vec = np.zeros(n, dtype=dt)
        self._temp_mat = np.zeros((n, n), dtype=dt)
        self._input = np.zeros(n, dtype=dt)
        # only the accumulated recurrence needs a second n x n product buffer
        self._temp_prod = np.zeros((n, n), dtype=dt) if self._formulation == ACCUMULATED else None

    def _seed_inverse_correlation(self) -> np.ndarray:
        n = self.n_coeffs
        dt = self._dtype
        inv_delta = dt.type(1) / self.initialization_factor
        if self._formulation == ACCUMULATED:
            return np.full((n, n), inv_delta, dtype=dt)
        p = np.eye(n, dtype=dt)
        p *= inv_delta
        return p

    # ------------------------------------------------------------------ accessors

    @property
    def formulation(self) -> str:
        return self._formulation

    @property
    def gain(self) -> np.ndarray:
        """Gain vector of the last update (read-only view)."""
        return _readonly(self._gain)

    @property
    def inverse_correlation(self) -> np.ndarray:
        """Inverse correlation matrix ``P`` (read-only view)."""
        return _readonly(self._inverse_correlation)

    @property
    def inverse_forgetting_factor(self) -> np.floating:
        return self._inverse_forgetting_factor

    @property
    def weight(self) -> np.ndarray:
        """Tap weight vector ``w`` (read-only view)."""
        return _readonly(self.w)

    @property
    def prior_error(self) -> np.floating:
        """A priori error ``d - w^T u`` of the last update."""
        return self._prior_error

    # ------------------------------------------------------------------ recursion

    def update(self, input_vector: ArrayLike, target: float) -> None:
        """
        Performs one recursive update of the weight vector and of ``P``.

        Parameters
        ----------
        input_vector : array_like of float, shape ``(n,)``
            Regressor ``u``.
        target : float
            Desired sample ``d``.

        Raises
        ------
        DimensionMismatchError
            If ``input_vector`` is not a vector of length ``n``.
        TypeError
            If ``input_vector`` is complex-valued.
        """
        u = as_vector(
            input_vector, self.n_coeffs, self._dtype, owner=self.__class__.__name__
        )
        # u may be a view of w or of the gain, both overwritten below
        self._input[...] = u
        u = self._input
        d = self._dtype.type(target)

        if self._formulation == CANONICAL:
            self._update_canonical(u, d)
        else:
            self._update_accumulated(u, d)

    def _update_canonical(self, u: np.ndarray, d: np.floating) -> None:
        p = self._inverse_correlation
        g = self._gain
        inv_lamb = self._inverse_forgetting_factor

        # gain
        np.dot(p, u, out=g)
        c = inv_lamb + np.dot(u, g)
        g /= c

        # a priori error with the not yet updated weight
        self._prior_error = d - np.dot(self.w, u)

        np.multiply(g, self._prior_error, out=self._temp_vec)
        self.w += self._temp_vec

        # rank-1 correction from the not yet updated P
        np.dot(p.T, u, out=self._temp_vec)
        np.outer(g, self._temp_vec, out=self._temp_mat)
        p -= self._temp_mat
        p *= inv_lamb

    def _update_accumulated(self, u: np.ndarray, d: np.floating) -> None:
        p = self._inverse_correlation
        g = self._gain
        inv_lamb = self._inverse_forgetting_factor

        np.dot(p, u, out=self._temp_vec)
        g += self._temp_vec
        c = inv_lamb + np.dot(g, g)
        g /= c

        self._prior_error = d - np.dot(self.w, u)

        np.multiply(g, self._prior_error, out=self._temp_vec)
        self.w += self._temp_vec

        # diag(g) times the row-broadcast regressor, then a dense product with P
        np.multiply(g[:, np.newaxis], u[np.newaxis, :], out=self._temp_mat)
        np.matmul(self._temp_mat, p, out=self._temp_prod)
        p -= self._temp_prod
        p *= inv_lamb

    def predict(self, input_vector: ArrayLike) -> np.floating:
        """Filter output ``w^T u`` for one regressor, without adapting."""
        u = as_vector(
            input_vector, self.n_coeffs, self._dtype, owner=self.__class__.__name__
        )
        return np.dot(self.w, u)

    # ------------------------------------------------------------------ batch

    @validate_input
    @ensure_real_signals
    def optimize(
        self,
        input_signal: np.ndarray,
        desired_signal: np.ndarray,
        verbose: bool = False,
        return_internal_states: bool = False,
    ) -> OptimizationResult:
        """
        Executes the RLS adaptation loop over a tapped delay line.

        Parameters
        ----------
        input_signal : array_like of float
            Input sequence ``x[k]`` with shape ``(N,)`` (will be flattened).
            The regressor at time ``k`` is
            ``x_k = [x[k], x[k-1], ..., x[k-n+1]]`` with zeros before ``k = 0``.
        desired_signal : array_like of float
            Desired sequence ``d[k]`` with shape ``(N,)``.
        verbose : bool, optional
            If True, prints the total runtime after completion.
        return_internal_states : bool, optional
            If True, ``result.extra`` also holds ``"gain"`` (shape ``(N, n)``)
            and ``"trace_P"`` (shape ``(N,)``), the trace of ``P`` after
            each update.

        Returns
        -------
        OptimizationResult
            - outputs : a priori output ``y[k] = w^T(k-1) x_k``.
            - errors : a priori error ``e[k] = d[k] - y[k]``.
            - coefficients : shape ``(N + 1, n)``; row 0 is the weight
              before the first sample.
            - error_type : ``"a_priori"``.
            - extra : ``"outputs_posteriori"`` and ``"errors_posteriori"``,
              computed with the updated weight.
        """
        tic: float = perf_counter()

        x: np.ndarray = np.asarray(input_signal, dtype=self._dtype)
        d: np.ndarray = np.asarray(desired_signal, dtype=self._dtype)

        n_samples: int = int(x.size)
        m: int = int(self.filter_order)

        outputs = np.zeros(n_samples, dtype=self._dtype)
        errors = np.zeros(n_samples, dtype=self._dtype)
        outputs_post = np.zeros(n_samples, dtype=self._dtype)
        errors_post = np.zeros(n_samples, dtype=self._dtype)

        coefficients = np.zeros((n_samples + 1, self.n_coeffs), dtype=self._dtype)
        coefficients[0] = self.w

        gain_track: Optional[np.ndarray] = (
            np.zeros((n_samples, self.n_coeffs), dtype=self._dtype) if return_internal_states else None
        )
        trace_track: Optional[np.ndarray] = (
            np.zeros(n_samples, dtype=self._dtype) if return_internal_states else None
        )

        x_padded = np.zeros(n_samples + m, dtype=self._dtype)
        x_padded[m:] = x

        for k in range(n_samples):
            x_k = x_padded[k : k + m + 1][::-1]

            self.update(x_k, d[k])

            errors[k] = self._prior_error
            outputs[k] = d[k] - self._prior_error
            coefficients[k + 1] = self.w

            outputs_post[k] = np.dot(self.w, x_k)
            errors_post[k] = d[k] - outputs_post[k]

            if gain_track is not None and trace_track is not None:
                gain_track[k] = self._gain
                trace_track[k] = np.trace(self._inverse_correlation)

        runtime_s: float = perf_counter() - tic
        if verbose:
            print(f"[RLS] Completed in {runtime_s * 1000:.03f} ms")

        extra: Dict[str, Any] = {
            "outputs_posteriori": outputs_post,
            "errors_posteriori": errors_post,
        }
        if return_internal_states:
            extra.update({"gain": gain_track, "trace_P": trace_track})

        return self._pack_results(
            outputs=outputs,
            errors=errors,
            coefficients=coefficients,
            runtime_s=runtime_s,
            error_type="a_priori",
            extra=extra,
        )

    def reset_filter(self, w_new: Optional[ArrayLike] = None) -> None:
        """Restore the construction-time state (same delta, lambda and length).

        ``w_new`` replaces the weight; zeros are used when omitted.
        """
        if self.initialization_factor is None:
            raise ValueError(
                f"{self.__class__.__name__}: initialization factor unknown, "
                "the state was restored without one."
            )
        if w_new is not None:
            w_new = as_vector(
                w_new, self.n_coeffs, self._dtype, name="w_new", owner=self.__class__.__name__
            )
        super().reset_filter(w_new)
        self._allocate()

    # ------------------------------------------------------------------ state

    def get_state(self) -> RLSState:
        """Copy of the persistent fields, suitable for checkpointing."""
        return RLSState(
            inverse_forgetting_factor=self._inverse_forgetting_factor,
            gain=self._gain,
            inverse_correlation=self._inverse_correlation,
            weight=self.w,
            prior_error=self._prior_error,
            formulation=self._formulation,
            dtype=self._dtype.name,
            initialization_factor=self.initialization_factor,
        )

    @classmethod
    def from_state(cls, state: Union[RLSState, Dict[str, Any]]) -> "RLS":
        """Rebuild a filter from :meth:`get_state` output (or its ``to_dict`` form)."""
        if not isinstance(state, RLSState):
            state = RLSState.from_dict(state)

        dt = np.dtype(state.dtype)
        delta = state.initialization_factor
        obj = cls(
            1.0 if delta is None else delta,
            dt.type(1) / state.inverse_forgetting_factor,
            w_init=state.weight,
            dtype=dt,
            formulation=state.formulation,
        )
        obj.initialization_factor = None if delta is None else dt.type(delta)
        # set directly so 1/(1/lambda) rounding cannot leak into the restored value
        obj._inverse_forgetting_factor = dt.type(state.inverse_forgetting_factor)
        obj._gain[...] = state.gain
        obj._inverse_correlation[...] = state.inverse_correlation
        obj._prior_error = dt.type(state.prior_error)
        return obj

    def __repr__(self) -> str:
        return (
            f"<RLS n_coeffs={self.n_coeffs} lambda={float(self.forgetting_factor):g} "
            f"formulation={self._formulation} dtype={self._dtype.name}>"
        )


# EOF
