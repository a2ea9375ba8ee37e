"""
Angular-momentum coupling coefficients.

Modules:
- wigner_3j: vectorized 3j symbols with selection-rule masking (sympy or pywigxjpf)
- wigner_3j_wigxjpf: optional WIGXJPF backend
- clebsch_gordan: Clebsch-Gordan coefficients built on the 3j symbols
"""

from gaunt.clebsch_gordan import clebsch_gordan
from gaunt.wigner_3j import selection_mask, wigner_3j

__all__ = [
    "clebsch_gordan",
    "selection_mask",
    "wigner_3j",
]
