# examples/example_system_id_rls.py
#################################################################################
#                        Example: System Identification                         #
#################################################################################
#                                                                               #
#  In this example we have a typical system identification scenario. We want    #
# to estimate the filter coefficients of an unknown system given by Wo. In      #
# order to accomplish this task we use an adaptive filter with the same         #
# number of coefficients, N, as the unkown system. The procedure is:            #
# 1)  Excitate both filters (the unknown and the adaptive) with the signal      #
#   x. In this case, x is generated as sign(randn).                             #
# 2)  Generate the desired signal, d = Wo' x + n, which is the output of the    #
#   unknown system considering some disturbance (noise) in the model. The       #
#   noise power is given by sigma_n2.                                           #
# 3)  Feed the regressor/desired pairs one at a time to the RLS filter, the     #
#   same way a streaming application would, and keep the a priori errors.      #
#                                                                               #
#     Adaptive Algorithm used here: RLS (canonical formulation)                 #
#                                                                               #
#################################################################################

from __future__ import annotations

import os
from time import perf_counter
import numpy as np

import pyrlsfiltering as prf
from pyrlsfiltering._utils.system_id import (
    build_desired_from_fir,
    generate_sign_input,
    tapped_delay_matrix,
    ProgressConfig,
    report_progress,
)


def main(seed: int = 0, plot: bool = True):
    rng_master = np.random.default_rng(seed)

    # ----------------------------
    # Definitions
    # ----------------------------
    ensemble = int(os.environ.get("PYRLS_ENSEMBLE", 100))
    K = int(os.environ.get("PYRLS_K", 500))
    Wo = np.array([0.32, -0.3, 0.5, 0.2], dtype=float)   # unknown system
    sigma_n2 = 0.04
    N = Wo.size
    lambda_ = 0.97
    delta = 1.0

    # ----------------------------
    # Memory allocation
    # ----------------------------
    W = np.zeros((N, K + 1, ensemble), dtype=float)
    MSE = np.zeros((K, ensemble), dtype=float)
    MSEmin = np.zeros((K, ensemble), dtype=float)
    traceP = np.zeros((K, ensemble), dtype=float)

    cfg = ProgressConfig(verbose_progress=True, print_every=10, tail_window=50)

    t0 = perf_counter()

    for l in range(ensemble):
        t_real0 = perf_counter()

        seed_l = int(rng_master.integers(0, 2**32 - 1))
        rng = np.random.default_rng(seed_l)

        x = generate_sign_input(rng, K)
        d, n = build_desired_from_fir(x, Wo, sigma_n2, rng)
        X = tapped_delay_matrix(x, N)

        flt = prf.RLS(delta, lambda_, N)
        W[:, 0, l] = flt.weight

        for k in range(K):
            flt.update(X[k], d[k])
            MSE[k, l] = flt.prior_error ** 2
            W[:, k + 1, l] = flt.weight
            traceP[k, l] = np.trace(flt.inverse_correlation)

        MSEmin[:, l] = np.abs(n) ** 2

        report_progress(
            l=l,
            ensemble=ensemble,
            t0=t0,
            t_real0=t_real0,
            mse_col=MSE[:, l],
            cfg=cfg,
        )

    total_time = perf_counter() - t0
    print(f"[Example/RLS] Total ensemble time: {total_time:.2f} s ({total_time/ensemble:.3f} s/realization)")

    # ----------------------------
    # Averaging
    # ----------------------------
    W_av = np.mean(W, axis=2)            # (N, K+1)
    MSE_av = np.mean(MSE, axis=1)        # (K,)
    MSEmin_av = np.mean(MSEmin, axis=1)
    traceP_av = np.mean(traceP, axis=1)

    # ----------------------------
    # Plots
    # ----------------------------
    if plot:
        import matplotlib.pyplot as plt  # local import avoids hard dependency in non-plot contexts

        k = np.arange(1, K + 1)

        fig, axes = plt.subplots(1, 3, figsize=(15, 4))
        axes[0].plot(k, 10 * np.log10(MSE_av + 1e-20), "-k")
        axes[0].set_title("Learning Curve for MSE")
        axes[0].set_xlabel("k"); axes[0].set_ylabel("MSE [dB]")
        axes[0].grid(True)

        axes[1].plot(k, 10 * np.log10(MSEmin_av + 1e-20), "-k")
        axes[1].set_title("Learning Curve for MSEmin")
        axes[1].set_xlabel("k"); axes[1].set_ylabel("MSEmin [dB]")
        axes[1].grid(True)

        axes[2].semilogy(k, traceP_av, "-k")
        axes[2].set_title("trace(P)")
        axes[2].set_xlabel("k")
        axes[2].grid(True)

        fig.tight_layout()

        fig2, ax = plt.subplots(1, 1, figsize=(10, 4))
        for i in range(N):
            ax.plot(W_av[i, :], label=f"w[{i}]")
            ax.axhline(Wo[i], color="k", linestyle=":", linewidth=0.8)
        ax.set_title("Evolution of the coefficients")
        ax.set_xlabel("k")
        ax.set_ylabel("Coefficient")
        ax.legend()
        ax.grid(True)

        fig2.tight_layout()
        plt.show()

    return {
        "Wo": Wo,
        "W_av": W_av,
        "MSE_av": MSE_av,
        "MSEmin_av": MSEmin_av,
        "traceP_av": traceP_av,
    }


if __name__ == "__main__":
    main(seed=0, plot=True)
