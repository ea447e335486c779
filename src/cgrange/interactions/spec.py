"""Provides InteractionClassSpec and routines building them from a Topology.

An InteractionClassSpec describes one family of interactions (e.g., all bonded
pairs). Each family contains several defined interactions (e.g., the bond
between types A and B), each of which has a number of instances in the system
(e.g., every bonded A-B site pair). Range finding tracks a [lower, upper] pair
for each defined interaction.
"""
from typing import Sequence, Optional, List, Tuple, Dict, Union, Final
import numpy as np
from ..constants import VERYLARGE
from ..errors import ConfigurationError
from .kinds import (
    ClassType,
    InteractionKind,
    DensityParams,
    HelicalParams,
    MoleculeParams,
    DISTANCE_CLASSES,
    MOLECULE_CLASSES,
)
from .topology import Topology

Payload = Union[None, DensityParams, HelicalParams, MoleculeParams]

DEFAULT_FM_BINWIDTH: Final = 0.01

# number of sites in the bonded path sampled by each bonded class
PATH_SITES: Final = {
    ClassType.PAIR_BONDED: 2,
    ClassType.ANGULAR: 3,
    ClassType.DIHEDRAL: 4,
    ClassType.R13: 3,
    ClassType.R14: 4,
    ClassType.R15: 5,
}


class InteractionClassSpec:
    """Defined interactions of a single interaction class and their ranges.

    Attributes:
    ----------
    kind:
        InteractionKind of the class.
    labels:
        For each defined interaction, the names that make up its name.
    instances:
        For each defined interaction, an integer array of shape
        (n_instances,n_body) with the participating sites (or molecules).
    type_indices:
        For each defined interaction, the site types it is defined over (empty
        tuples for classes not defined over types).
    cutoff:
        Nominal cutoff of the class.
    fm_binwidth:
        Bin width used for histograms of the sampled coordinate.
    output_parameter_distribution:
        0: no raw samples; 1: write samples and delete them after
        histogramming; 2: write and keep samples.
    payload:
        Class specific parameters (DensityParams, HelicalParams, MoleculeParams)
        or None.
    lower_cutoffs, upper_cutoffs:
        Running bounds of each defined interaction.
    defined_to_matched_index_map:
        Positive entries mark interactions that are matched.
    interaction_column_indices:
        Cumulative basis column offsets of the defined interactions.
    interaction_class_column_index:
        Column offset of the class in a global matrix.
    """

    def __init__(
        self,
        kind: InteractionKind,
        labels: Sequence[Sequence[str]] = (),
        instances: Sequence[np.ndarray] = (),
        type_indices: Optional[Sequence[Tuple[int, ...]]] = None,
        cutoff: float = VERYLARGE,
        fm_binwidth: float = DEFAULT_FM_BINWIDTH,
        output_parameter_distribution: int = 0,
        payload: Payload = None,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        kind:
            InteractionKind of the class.
        labels:
            Names of each defined interaction.
        instances:
            Site (or molecule) index arrays of each defined interaction.
        type_indices:
            Site types of each defined interaction. Defaults to empty tuples.
        cutoff:
            Nominal cutoff of the class.
        fm_binwidth:
            Positive histogram bin width.
        output_parameter_distribution:
            One of 0, 1 or 2; see class description.
        payload:
            Class specific parameters.
        """
        if output_parameter_distribution not in (0, 1, 2):
            raise ConfigurationError(
                "output_parameter_distribution must be 0, 1 or 2 for "
                "{} interactions.".format(kind.full_name)
            )
        if len(labels) != len(instances):
            raise ValueError("labels and instances must be of the same length.")
        if fm_binwidth <= 0:
            raise ValueError("fm_binwidth must be positive.")
        self.kind = kind
        self.labels = [tuple(label) for label in labels]
        self.instances = [np.asarray(inst, dtype=int) for inst in instances]
        if type_indices is None:
            type_indices = [()] * len(self.labels)
        self.type_indices = [tuple(t) for t in type_indices]
        self.cutoff = float(cutoff)
        self.fm_binwidth = float(fm_binwidth)
        self.output_parameter_distribution = output_parameter_distribution
        self.payload = payload
        self.interaction_class_column_index = 0
        self.reset_ranges()

    @property
    def class_type(self) -> ClassType:
        """ClassType of the class."""
        return self.kind.class_type

    @property
    def class_subtype(self) -> int:
        """Subtype of the class."""
        return self.kind.subtype

    @property
    def full_name(self) -> str:
        """Human readable name of the class."""
        return self.kind.full_name

    @property
    def n_defined(self) -> int:
        """Number of defined interactions."""
        return len(self.labels)

    @property
    def writes_distributions(self) -> bool:
        """Whether raw samples are requested for this class."""
        return self.output_parameter_distribution in (1, 2)

    def reset_ranges(self) -> None:
        """Set all bounds to the unset sentinel and mark every interaction matched."""
        n = self.n_defined
        self.lower_cutoffs = np.full(n, VERYLARGE)
        self.upper_cutoffs = np.full(n, -VERYLARGE)
        self.defined_to_matched_index_map = np.arange(1, n + 1)
        self.interaction_column_indices = np.zeros(n + 1, dtype=int)

    def interaction_name(self, index: int, sep: str = " ") -> str:
        """Return the name of a defined interaction, joining its labels with sep."""
        return sep.join(self.labels[index])

    def basename(self, index: int) -> str:
        """Return the file stem used for the distribution files of an interaction."""
        return self.interaction_name(index, sep="_")


class CGModel:
    """Topology plus the interaction classes of a coarse-grained model.

    Attributes:
    ----------
    topology:
        Topology instance describing the system.
    interaction_classes:
        List of InteractionClassSpec instances.
    """

    def __init__(
        self, topology: Topology, interaction_classes: Sequence[InteractionClassSpec]
    ) -> None:
        """Initialize."""
        self.topology = topology
        self.interaction_classes = list(interaction_classes)

    def __iter__(self):
        """Iterate over interaction classes."""
        return iter(self.interaction_classes)

    def of_type(self, class_type: ClassType) -> List[InteractionClassSpec]:
        """Return the classes of a given ClassType."""
        return [s for s in self.interaction_classes if s.class_type == class_type]


def _check_parameter_lengths(
    spec: InteractionClassSpec, **params: Optional[np.ndarray]
) -> None:
    for name, values in params.items():
        if values is not None and len(values) != spec.n_defined:
            raise ConfigurationError(
                "{} of {} needs one value per defined interaction ({}), got {}.".format(
                    name, spec.full_name, spec.n_defined, len(values)
                )
            )


def _group_by_types(
    topology: Topology, paths: np.ndarray
) -> Dict[Tuple[int, ...], List[np.ndarray]]:
    grouped: Dict[Tuple[int, ...], List[np.ndarray]] = {}
    for path in paths:
        types = tuple(int(t) for t in topology.site_types[path])
        if types[::-1] < types:
            types = types[::-1]
            path = path[::-1]
        grouped.setdefault(types, []).append(path)
    return grouped


def one_body_class(topology: Topology, subtype: int = 0) -> InteractionClassSpec:
    """Create the one-body class: one defined interaction per site type."""
    labels = [(name,) for name in topology.type_names]
    instances = [
        np.nonzero(topology.site_types == t)[0][:, None] for t in range(topology.n_types)
    ]
    return InteractionClassSpec(
        kind=InteractionKind(ClassType.ONE_BODY, subtype),
        labels=labels,
        instances=instances,
        type_indices=[(t,) for t in range(topology.n_types)],
    )


def pair_nonbonded_class(
    topology: Topology,
    cutoff: float,
    subtype: int = 0,
    fm_binwidth: float = DEFAULT_FM_BINWIDTH,
    output_parameter_distribution: int = 0,
    exclude_bonded: bool = True,
) -> InteractionClassSpec:
    """Create the pair nonbonded class.

    One interaction is defined for every unordered pair of site types (including
    types without sites). Instances are all site pairs of those types, except
    directly bonded pairs if exclude_bonded is truthy.
    """
    excluded = topology.bonded_pairs() if exclude_bonded else set()
    first, second = np.triu_indices(topology.n_sites, k=1)
    pairs = np.stack([first, second], axis=1)
    if excluded:
        keep = [frozenset((int(a), int(b))) not in excluded for a, b in pairs]
        pairs = pairs[np.asarray(keep, dtype=bool)]
    grouped = _group_by_types(topology, pairs)
    labels, instances, type_indices = [], [], []
    for t1 in range(topology.n_types):
        for t2 in range(t1, topology.n_types):
            labels.append((topology.type_names[t1], topology.type_names[t2]))
            type_indices.append((t1, t2))
            found = grouped.get((t1, t2), [])
            instances.append(np.array(found, dtype=int).reshape(-1, 2))
    return InteractionClassSpec(
        kind=InteractionKind(ClassType.PAIR_NONBONDED, subtype),
        labels=labels,
        instances=instances,
        type_indices=type_indices,
        cutoff=cutoff,
        fm_binwidth=fm_binwidth,
        output_parameter_distribution=output_parameter_distribution,
    )


def bonded_class(
    topology: Topology,
    class_type: ClassType,
    subtype: int = 0,
    fm_binwidth: float = DEFAULT_FM_BINWIDTH,
    output_parameter_distribution: int = 0,
) -> InteractionClassSpec:
    """Create a bonded class from the bonded paths of a topology.

    One interaction is defined per distinct sequence of site types along a
    path. R13/R14/R15 classes with subtype 0 are not sampled and are created
    without defined interactions.
    """
    if class_type not in PATH_SITES:
        raise ValueError("{} is not a bonded class.".format(class_type.value))
    kind = InteractionKind(class_type, subtype)
    if class_type in DISTANCE_CLASSES and subtype == 0:
        return InteractionClassSpec(
            kind=kind, output_parameter_distribution=output_parameter_distribution
        )
    grouped = _group_by_types(topology, topology.bonded_paths(PATH_SITES[class_type]))
    keys = sorted(grouped)
    return InteractionClassSpec(
        kind=kind,
        labels=[tuple(topology.type_names[t] for t in key) for key in keys],
        instances=[np.stack(grouped[key]) for key in keys],
        type_indices=keys,
        fm_binwidth=fm_binwidth,
        output_parameter_distribution=output_parameter_distribution,
    )


def molecule_class(
    topology: Topology,
    class_type: ClassType,
    subtype: int = 0,
    fm_binwidth: float = DEFAULT_FM_BINWIDTH,
    output_parameter_distribution: int = 0,
    helical_partners: Optional[Sequence[Sequence[Sequence[int]]]] = None,
    r0: Optional[Sequence[float]] = None,
    sigma2: Optional[Sequence[float]] = None,
) -> InteractionClassSpec:
    """Create a radius of gyration or helical class.

    One interaction is defined per molecule group; its instances are the
    molecules in that group. Subtype 0 creates a class without defined
    interactions.

    Arguments:
    ---------
    topology:
        Topology providing molecules and molecule groups.
    class_type:
        ClassType.RADIUS_OF_GYRATION or ClassType.HELICAL.
    subtype:
        0 (not sampled) or 1.
    fm_binwidth:
        Histogram bin width.
    output_parameter_distribution:
        See InteractionClassSpec.
    helical_partners:
        Helical classes only: one collection of site pairs per molecule.
    r0:
        Helical classes only: optional reference separations per group.
    sigma2:
        Helical classes only: optional separation variances per group.
    """
    if class_type not in MOLECULE_CLASSES:
        raise ValueError("{} is not a molecule class.".format(class_type.value))
    kind = InteractionKind(class_type, subtype)
    payload: Payload
    if class_type == ClassType.HELICAL:
        if helical_partners is None:
            helical_partners = [[] for _ in topology.molecules]
        payload = HelicalParams(topology.molecules, helical_partners, r0, sigma2)
    else:
        payload = MoleculeParams(topology.molecules)
    if subtype == 0:
        return InteractionClassSpec(
            kind=kind,
            output_parameter_distribution=output_parameter_distribution,
            payload=payload,
        )
    labels, instances = [], []
    for group, name in enumerate(topology.molecule_group_names):
        labels.append((name,))
        instances.append(np.nonzero(topology.molecule_groups == group)[0][:, None])
    spec = InteractionClassSpec(
        kind=kind,
        labels=labels,
        instances=instances,
        fm_binwidth=fm_binwidth,
        output_parameter_distribution=output_parameter_distribution,
        payload=payload,
    )
    if isinstance(payload, HelicalParams):
        _check_parameter_lengths(spec, r0=payload.r0, sigma2=payload.sigma2)
    return spec


def density_class(
    topology: Topology,
    group_names: Sequence[str],
    groups: np.ndarray,
    cutoff: float,
    subtype: int = 0,
    fm_binwidth: float = DEFAULT_FM_BINWIDTH,
    output_parameter_distribution: int = 0,
    sigma: Optional[Sequence[float]] = None,
    switch: Optional[Sequence[float]] = None,
) -> InteractionClassSpec:
    """Create the density class.

    One interaction is defined per ordered pair of density groups (g1, g2),
    at index g1 * n_groups + g2: the density of group g2 evaluated at the sites
    of group g1. Its instances are the sites whose type belongs to g1. Subtype 0
    creates a class without defined interactions.
    """
    payload = DensityParams(group_names, groups, sigma, switch)
    if payload.n_types != topology.n_types:
        raise ValueError("groups must have one column per site type.")
    kind = InteractionKind(ClassType.DENSITY, subtype)
    if subtype == 0:
        return InteractionClassSpec(
            kind=kind,
            cutoff=cutoff,
            output_parameter_distribution=output_parameter_distribution,
            payload=payload,
        )
    labels, instances = [], []
    for g1, name1 in enumerate(payload.group_names):
        member_types = np.nonzero(payload.groups[g1])[0]
        sites = np.nonzero(np.isin(topology.site_types, member_types))[0]
        for name2 in payload.group_names:
            labels.append((name1, name2))
            instances.append(sites[:, None])
    spec = InteractionClassSpec(
        kind=kind,
        labels=labels,
        instances=instances,
        cutoff=cutoff,
        fm_binwidth=fm_binwidth,
        output_parameter_distribution=output_parameter_distribution,
        payload=payload,
    )
    _check_parameter_lengths(spec, sigma=payload.sigma, switch=payload.switch)
    return spec


def three_body_nonbonded_class(subtype: int = 0) -> InteractionClassSpec:
    """Create the three body nonbonded class, which is never sampled here."""
    return InteractionClassSpec(
        kind=InteractionKind(ClassType.THREE_BODY_NONBONDED, subtype)
    )
