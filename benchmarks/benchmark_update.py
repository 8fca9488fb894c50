# benchmarks/benchmark_update.py
from __future__ import annotations

import argparse
import csv
from dataclasses import dataclass
from time import perf_counter
from typing import Dict, List, Tuple

import numpy as np

import pyrlsfiltering as prf


# =============================================================================
# Benchmark configuration
# =============================================================================

@dataclass
class Scenario:
    K: int = 5000
    lengths: Tuple[int, ...] = (4, 8, 16, 32, 64, 128)
    dtypes: Tuple[str, ...] = ("float64", "float32")
    formulations: Tuple[str, ...] = ("canonical",)
    delta: float = 1e-2
    lambda_: float = 0.99


def run_one(n: int, dtype: str, formulation: str, scenario: Scenario, rng: np.random.Generator) -> Dict[str, object]:
    """Time K calls to RLS.update for one (length, dtype, formulation)."""
    U = rng.standard_normal((scenario.K, n)).astype(dtype)
    w_true = rng.standard_normal(n)
    d = (U @ w_true.astype(dtype)).astype(dtype)

    flt = prf.RLS(scenario.delta, scenario.lambda_, n, dtype=dtype, formulation=formulation)

    tic = perf_counter()
    for k in range(scenario.K):
        flt.update(U[k], d[k])
    runtime_s = perf_counter() - tic

    p = np.asarray(flt.inverse_correlation, dtype=float)
    return {
        "n": n,
        "dtype": dtype,
        "formulation": formulation,
        "K": scenario.K,
        "runtime_s": runtime_s,
        "updates_per_s": scenario.K / runtime_s if runtime_s > 0 else float("inf"),
        "us_per_update": 1e6 * runtime_s / scenario.K,
        "final_abs_error": float(abs(flt.prior_error)),
        "asymmetry_P": float(np.max(np.abs(p - p.T))),
    }


def benchmark(*, scenario: Scenario, out_csv_path: str, base_seed: int, quiet: bool) -> List[Dict[str, object]]:
    rng_master = np.random.default_rng(base_seed)
    rows: List[Dict[str, object]] = []

    fieldnames = [
        "n",
        "dtype",
        "formulation",
        "K",
        "runtime_s",
        "updates_per_s",
        "us_per_update",
        "final_abs_error",
        "asymmetry_P",
    ]

    with open(out_csv_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for formulation in scenario.formulations:
            for dtype in scenario.dtypes:
                for n in scenario.lengths:
                    rng = np.random.default_rng(int(rng_master.integers(0, 2**32 - 1)))
                    row = run_one(n, dtype, formulation, scenario, rng)
                    writer.writerow(row)
                    rows.append(row)

                    if not quiet:
                        print(
                            f"[{formulation:>11} | {dtype:>7} | n={n:>4}] "
                            f"{row['us_per_update']:8.2f} us/update | "
                            f"|e|={row['final_abs_error']:.2e} | asym(P)={row['asymmetry_P']:.2e}"
                        )

    return rows


def parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="Per-update cost of the RLS recursion as a function of the filter length."
    )
    p.add_argument("--out", type=str, default="benchmarks/results_update.csv", help="Output CSV path.")
    p.add_argument("--K", type=int, default=5000, help="Number of updates per configuration.")
    p.add_argument("--lengths", type=int, nargs="+", default=[4, 8, 16, 32, 64, 128], help="Filter lengths n.")
    p.add_argument("--dtypes", type=str, nargs="+", default=["float64", "float32"], help="Working precisions.")
    p.add_argument("--formulations", type=str, nargs="+", default=["canonical"],
                   help="Update recurrences (canonical, accumulated).")
    p.add_argument("--delta", type=float, default=1e-2, help="Initialization factor delta.")
    p.add_argument("--lambda", dest="lambda_", type=float, default=0.99, help="Forgetting factor.")
    p.add_argument("--seed", type=int, default=123, help="Base seed for reproducibility.")
    p.add_argument("--quiet", action="store_true", help="Less printing.")
    return p.parse_args()


def main() -> None:
    args = parse_args()

    scenario = Scenario(
        K=args.K,
        lengths=tuple(int(n) for n in args.lengths),
        dtypes=tuple(args.dtypes),
        formulations=tuple(args.formulations),
        delta=float(args.delta),
        lambda_=float(args.lambda_),
    )

    benchmark(
        scenario=scenario,
        out_csv_path=str(args.out),
        base_seed=int(args.seed),
        quiet=bool(args.quiet),
    )


if __name__ == "__main__":
    main()
