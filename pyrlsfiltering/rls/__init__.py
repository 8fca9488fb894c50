#  rls.__init__.py

from .rls import RLS, FORMULATIONS
from .state import RLSState

__all__ = [
    "RLS",
    "RLSState",
    "FORMULATIONS",
]
