"""Provides Boltzmann inversion of sampled distributions into initial potentials."""
# __init__ doesn't use the imported objects
# ruff: noqa: F401
from .basis import BasisSet, LinearSplineBasis
from .matrix import BIMatrix, SolverOptions, DEFAULT_SOLVER_OPTIONS
from .inversion import (
    BISolution,
    boltzmann_potentials,
    calculate_bi,
    count_pairs,
    invert_class,
    write_bi_table,
)
