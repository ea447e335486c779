"""Provides the closed set of interaction classes and their parameter payloads.

An interaction class is identified by an InteractionKind, the pair of its
ClassType and an integer subtype. Subtypes select a variant of the class (e.g.,
the density weight function, or whether angles are sampled as angles or as
end-to-end distances). Parameters that only make sense for a given class are
carried by payload objects instead of being attributes of every class.
"""
from enum import Enum
from typing import NamedTuple, Sequence, Optional, List
import numpy as np


class ClassType(Enum):
    """Families of coarse-grained interactions."""

    ONE_BODY = "one body"
    PAIR_NONBONDED = "pair nonbonded"
    PAIR_BONDED = "pair bonded"
    ANGULAR = "angular"
    DIHEDRAL = "dihedral"
    R13 = "R13 distance"
    R14 = "R14 distance"
    R15 = "R15 distance"
    DENSITY = "density"
    RADIUS_OF_GYRATION = "radius of gyration"
    HELICAL = "helical"
    THREE_BODY_NONBONDED = "three body nonbonded"


DISTANCE_CLASSES = frozenset([ClassType.R13, ClassType.R14, ClassType.R15])
MOLECULE_CLASSES = frozenset([ClassType.RADIUS_OF_GYRATION, ClassType.HELICAL])


class InteractionKind(NamedTuple):
    """Tagged variant naming a class and the subtype selecting its evaluator."""

    class_type: ClassType
    subtype: int = 0

    @property
    def full_name(self) -> str:
        """Human readable name of the class."""
        return "{} (subtype {})".format(self.class_type.value, self.subtype)


class MoleculeParams:
    """Per-molecule site lists for whole-molecule coordinates.

    Attributes:
    ----------
    molecule_sites:
        List with one integer array per molecule, holding the sites of that
        molecule.
    """

    def __init__(self, molecule_sites: Sequence[Sequence[int]]) -> None:
        """Initialize.

        Arguments:
        ---------
        molecule_sites:
            Iterable of site index collections, one per molecule.
        """
        self.molecule_sites: List[np.ndarray] = [
            np.asarray(sites, dtype=int) for sites in molecule_sites
        ]


class HelicalParams(MoleculeParams):
    """Parameters of the helical fraction coordinate.

    Attributes:
    ----------
    molecule_sites:
        See MoleculeParams.
    partners:
        List with one integer array of shape (n_partners,2) per molecule. Each
        row is a pair of sites whose separation is compared against r0.
    r0:
        Reference helical separation for each defined interaction. Read from
        hel.prm if not given.
    sigma2:
        Variance of the helical separation for each defined interaction. Read
        from hel.prm if not given.
    """

    def __init__(
        self,
        molecule_sites: Sequence[Sequence[int]],
        partners: Sequence[Sequence[Sequence[int]]],
        r0: Optional[Sequence[float]] = None,
        sigma2: Optional[Sequence[float]] = None,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        molecule_sites:
            Iterable of site index collections, one per molecule.
        partners:
            Iterable with one collection of site pairs per molecule.
        r0:
            Optional reference separations, one per defined interaction.
        sigma2:
            Optional separation variances, one per defined interaction.
        """
        super().__init__(molecule_sites)
        if len(partners) != len(self.molecule_sites):
            raise ValueError("partners must have one entry per molecule.")
        self.partners: List[np.ndarray] = [
            np.asarray(p, dtype=int).reshape(-1, 2) for p in partners
        ]
        self.r0 = None if r0 is None else np.asarray(r0, dtype=float)
        self.sigma2 = None if sigma2 is None else np.asarray(sigma2, dtype=float)


class DensityParams:
    """Parameters of local density coordinates.

    Attributes:
    ----------
    group_names:
        Names of the density groups.
    groups:
        Boolean array of shape (n_groups,n_types); entry [g,t] is True if site
        type t is a member of density group g.
    sigma:
        Kernel width for each defined interaction. Read from den.prm if not
        given.
    switch:
        Switching distance for each defined interaction (only used by the tanh
        kernel). Read from den.prm if not given.
    """

    def __init__(
        self,
        group_names: Sequence[str],
        groups: np.ndarray,
        sigma: Optional[Sequence[float]] = None,
        switch: Optional[Sequence[float]] = None,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        group_names:
            Names of the density groups.
        groups:
            Group membership table of shape (n_groups,n_types).
        sigma:
            Optional kernel widths, one per defined interaction.
        switch:
            Optional switching distances, one per defined interaction.
        """
        self.group_names = list(group_names)
        self.groups = np.asarray(groups, dtype=bool)
        if self.groups.ndim != 2 or self.groups.shape[0] != len(self.group_names):
            raise ValueError("groups must be of shape (n_groups,n_types).")
        self.sigma = None if sigma is None else np.asarray(sigma, dtype=float)
        self.switch = None if switch is None else np.asarray(switch, dtype=float)

    @property
    def n_groups(self) -> int:
        """Number of density groups."""
        return len(self.group_names)

    @property
    def n_types(self) -> int:
        """Number of site types covered by the membership table."""
        return self.groups.shape[1]
