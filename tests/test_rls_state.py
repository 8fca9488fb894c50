# tests/test_rls_state.py

import json

import numpy as np
import pytest

from pyrlsfiltering import RLS, RLSState, DimensionMismatchError


def _run(model, n_updates, seed=0):
    rng = np.random.default_rng(seed)
    for _ in range(n_updates):
        model.update(rng.standard_normal(model.n_coeffs), rng.standard_normal())
    return model


def _assert_same_state(a, b):
    np.testing.assert_array_equal(a.inverse_forgetting_factor, b.inverse_forgetting_factor)
    np.testing.assert_array_equal(a.prior_error, b.prior_error)
    np.testing.assert_array_equal(a.gain, b.gain)
    np.testing.assert_array_equal(a.inverse_correlation, b.inverse_correlation)
    np.testing.assert_array_equal(a.weight, b.weight)


@pytest.mark.parametrize("dtype", [np.float64, np.float32])
@pytest.mark.parametrize("formulation", ["canonical", "accumulated"])
def test_json_round_trip_is_bit_exact(dtype, formulation):
    model = _run(RLS(0.1, 0.97, 4, dtype=dtype, formulation=formulation), 25)

    payload = json.dumps(model.get_state().to_dict())
    restored = RLS.from_state(RLSState.from_dict(json.loads(payload)))

    _assert_same_state(model, restored)
    assert restored.dtype == np.dtype(dtype)
    assert restored.formulation == formulation


def test_restored_filter_continues_identically():
    model = _run(RLS(0.1, 0.97, 3), 10)
    restored = RLS.from_state(model.get_state())

    _run(model, 10, seed=1)
    _run(restored, 10, seed=1)

    _assert_same_state(model, restored)


def test_from_state_accepts_plain_dict():
    model = _run(RLS(0.1, 0.97, 2), 5)

    restored = RLS.from_state(model.get_state().to_dict())

    _assert_same_state(model, restored)


def test_state_is_a_copy():
    model = _run(RLS(0.1, 0.97, 2), 5)
    state = model.get_state()
    w_saved = state.weight.copy()

    _run(model, 5, seed=2)

    np.testing.assert_array_equal(state.weight, w_saved)


def test_restored_buffers_are_independent_of_state():
    state = _run(RLS(0.1, 0.97, 2), 5).get_state()
    p_saved = state.inverse_correlation.copy()

    restored = RLS.from_state(state)
    _run(restored, 3)

    np.testing.assert_array_equal(state.inverse_correlation, p_saved)


def test_to_dict_layout():
    data = RLS(0.5, 0.5, 2).get_state().to_dict()

    assert data["inverse_forgetting_factor"] == 2.0
    assert data["gain"] == [0.0, 0.0]
    assert data["inverse_correlation"] == [[2.0, 0.0], [0.0, 2.0]]
    assert data["weight"] == [0.0, 0.0]
    assert data["prior_error"] == 0.0
    assert data["formulation"] == "canonical"
    assert data["dtype"] == "float64"
    assert data["initialization_factor"] == 0.5


def test_length_is_implicit_in_shapes():
    state = RLS(0.5, 0.5, 5).get_state()
    assert state.n_coeffs == 5


@pytest.mark.parametrize(
    "gain, p, weight",
    [
        ([0.0, 0.0, 0.0], np.eye(2), [0.0, 0.0]),
        ([0.0, 0.0], np.eye(3), [0.0, 0.0]),
        ([0.0, 0.0], np.eye(2), np.zeros((2, 1))),
    ],
)
def test_inconsistent_shapes_rejected(gain, p, weight):
    with pytest.raises(DimensionMismatchError):
        RLSState(
            inverse_forgetting_factor=1.0,
            gain=gain,
            inverse_correlation=p,
            weight=weight,
            prior_error=0.0,
        )


def test_missing_field_rejected():
    data = RLS(0.5, 0.5, 2).get_state().to_dict()
    del data["weight"]

    with pytest.raises(KeyError):
        RLSState.from_dict(data)


def test_reset_needs_initialization_factor():
    data = _run(RLS(0.5, 0.9, 2), 3).get_state().to_dict()
    data["initialization_factor"] = None
    restored = RLS.from_state(data)

    with pytest.raises(ValueError):
        restored.reset_filter()


def test_reset_after_restore_uses_saved_delta():
    restored = RLS.from_state(_run(RLS(0.25, 0.9, 2), 3).get_state())

    restored.reset_filter()

    np.testing.assert_allclose(restored.inverse_correlation, 4.0 * np.eye(2))
