# tests/test_rls_accumulated.py

import numpy as np
import pytest

from pyrlsfiltering import RLS


class TestAccumulatedFormulation:
    """The accumulated recurrence is a distinct algorithm; these pin its equations."""

    def test_constant_filled_seed(self):
        model = RLS(0.5, 1.0, 3, formulation="accumulated")

        assert model.formulation == "accumulated"
        np.testing.assert_array_equal(model.inverse_correlation, np.full((3, 3), 2.0))

    def test_first_scalar_step_matches_canonical(self):
        acc = RLS.with_weight(1.0, 1.0, [0.0], formulation="accumulated")
        can = RLS.with_weight(1.0, 1.0, [0.0])

        acc.update([2.0], 4.0)
        can.update([2.0], 4.0)

        assert acc.prior_error == can.prior_error == 4.0
        np.testing.assert_allclose(acc.gain, can.gain)
        np.testing.assert_allclose(acc.weight, can.weight)
        np.testing.assert_allclose(acc.inverse_correlation, can.inverse_correlation)

    def test_gain_accumulates_across_updates(self):
        acc = RLS.with_weight(1.0, 1.0, [0.0], formulation="accumulated")
        can = RLS.with_weight(1.0, 1.0, [0.0])
        for model in (acc, can):
            model.update([2.0], 4.0)
            model.update([0.0], 1.0)

        # canonical: zero input -> zero gain -> weight unchanged
        np.testing.assert_allclose(can.gain, [0.0])
        np.testing.assert_allclose(can.weight, [1.6])

        # accumulated: g = (0 + 0.4) / (1 + 0.4^2)
        g = 0.4 / 1.16
        assert acc.prior_error == pytest.approx(1.0)
        np.testing.assert_allclose(acc.gain, [g])
        np.testing.assert_allclose(acc.weight, [1.6 + g])
        np.testing.assert_allclose(acc.inverse_correlation, [[0.2]])

    def test_two_tap_step_by_hand(self):
        acc = RLS(1.0, 1.0, 2, formulation="accumulated")
        can = RLS(1.0, 1.0, 2)

        acc.update([1.0, 0.0], 1.0)
        can.update([1.0, 0.0], 1.0)

        third = 1.0 / 3.0
        np.testing.assert_allclose(acc.gain, [third, third])
        np.testing.assert_allclose(acc.weight, [third, third])
        np.testing.assert_allclose(acc.inverse_correlation, np.full((2, 2), 2.0 * third))

        np.testing.assert_allclose(can.gain, [0.5, 0.0])
        np.testing.assert_allclose(can.weight, [0.5, 0.0])
        np.testing.assert_allclose(can.inverse_correlation, [[0.5, 0.0], [0.0, 1.0]])

    def test_forgetting_scales_correction(self):
        model = RLS(1.0, 0.5, 2, formulation="accumulated")

        model.update([0.0, 0.0], 0.0)

        # zero input and zero gain: P <- 2 (P - 0)
        np.testing.assert_allclose(model.inverse_correlation, np.full((2, 2), 2.0))

    def test_not_equivalent_to_canonical(self, rls_test_data_real):
        data = rls_test_data_real
        x, d = data["x"][:200], data["d"][:200]
        n = data["order"] + 1

        acc = RLS(0.1, 0.99, n, formulation="accumulated")
        can = RLS(0.1, 0.99, n)
        acc.optimize(x, d)
        can.optimize(x, d)

        assert not np.allclose(acc.weight, can.weight)

    def test_product_buffer_only_in_accumulated_mode(self):
        assert RLS(1.0, 1.0, 2, formulation="accumulated")._temp_prod.shape == (2, 2)
        assert RLS(1.0, 1.0, 2)._temp_prod is None

    def test_float32(self):
        model = RLS(1.0, 1.0, 2, dtype=np.float32, formulation="accumulated")

        model.update([1.0, 0.0], 1.0)

        assert model.inverse_correlation.dtype == np.float32
        np.testing.assert_allclose(model.weight, [1 / 3, 1 / 3], rtol=1e-6)
