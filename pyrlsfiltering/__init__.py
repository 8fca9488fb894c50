# pyrlsfiltering/__init__.py

from .base import AdaptiveFilter, OptimizationResult
from .rls import *
from ._utils.validation import DimensionMismatchError

__version__ = "0.1.0"
__author__ = "BruninLima"

__all__ = ["AdaptiveFilter", "OptimizationResult",
    "RLS", "RLSState", "FORMULATIONS",
    "DimensionMismatchError",
    "info"]


def info():
    """Prints an overview of the library."""
    print("\n" + "="*70)
    print("      PyRLS Filtering - Library Overview")
    print("      Reference: 'Adaptive Filtering' by Paulo S. R. Diniz (Cap 5)")
    print("="*70)
    sections = {
        "RLS (canonical)": "Exponentially weighted RLS, matrix inversion lemma update",
        "RLS (accumulated)": "Legacy accumulated-gain recurrence, constant-filled P(0)",
        "State": "RLSState checkpoint of w, P, gain, prior error, 1/lambda",
    }
    for cap, algs in sections.items():
        print(f"\n{cap:25}: {algs}")

    print("\n" + "-"*70)
    print("Usage example: from pyrlsfiltering import RLS")
    print("Documentation: help(pyrlsfiltering.RLS)")
    print("="*70 + "\n")
