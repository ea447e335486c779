"""Provides the description of coarse-grained interaction classes."""
# __init__ doesn't use the imported objects
# ruff: noqa: F401
from .kinds import (
    ClassType,
    InteractionKind,
    DensityParams,
    HelicalParams,
    MoleculeParams,
)
from .topology import Topology
from .spec import (
    InteractionClassSpec,
    CGModel,
    one_body_class,
    pair_nonbonded_class,
    bonded_class,
    molecule_class,
    density_class,
    three_body_nonbonded_class,
)
from .params import read_helical_parameter_file, read_density_parameter_file
