"""Finds interaction ranges and initial potentials for coarse-grained models.

Force matching a coarse-grained model requires the domain over which each
interaction (bond, angle, dihedral, nonbonded pair, local density, ...) is
parameterized. This module samples those domains from a trajectory, writes
them to range files, histograms the sampled coordinates, and Boltzmann inverts
the histograms to produce initial potentials. It does not itself perform force
matching.

The primary entry points are find_ranges and initial_potentials. Models are
described with a Topology and interaction classes built by the routines in
cgrange.interactions; more advanced features require explicit imports from
submodules.
"""

# __init__ doesn't use the imported objects
# ruff: noqa: F401
from .trajectory import Trajectory
from .pipeline import find_ranges, initial_potentials
from .errors import ConfigurationError
from .interactions import (
    ClassType,
    Topology,
    CGModel,
    one_body_class,
    pair_nonbonded_class,
    bonded_class,
    molecule_class,
    density_class,
    three_body_nonbonded_class,
)
from .rangefind import RangeFinder
