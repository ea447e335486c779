r"""Maps interaction classes to the routines that sample their coordinates.

Each interaction class is identified by its ClassType and subtype. The table
below selects the coordinate evaluator used for every defined interaction of a
class at every frame:

    one body                       any    nothing
    pair nonbonded / pair bonded   any    pair distance
    angular                        0      angle
                                   1      end-to-end distance
    dihedral                       0      dihedral
                                   1      end-to-end distance
    R13 / R14 / R15                0      nothing
                                   1      end-to-end distance
    radius of gyration             0      nothing
                                   1      radius of gyration
    helical                        0      nothing
                                   1      helical fraction
    density                        0-4    nothing (see DensityClassComputer)
    three body nonbonded           any    nothing

Any other subtype is a configuration error.
"""
from typing import Callable, Dict, Optional, Iterator, Tuple, Final
import numpy as np
from .. import geometry
from ..density import DensityEngine
from ..errors import ConfigurationError
from ..interactions import (
    InteractionClassSpec,
    InteractionKind,
    ClassType,
    HelicalParams,
    MoleculeParams,
)
from ..interactions.kinds import DISTANCE_CLASSES, MOLECULE_CLASSES
from ..trajectory import Frame

Evaluator = Callable[[InteractionClassSpec, int, Frame], Optional[np.ndarray]]


def calc_nothing(
    spec: InteractionClassSpec, index: int, frame: Frame  # noqa: ARG001
) -> Optional[np.ndarray]:
    """Do not sample anything."""
    return None


def calc_pair_distance_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the end-to-end distance of every instance."""
    return geometry.pair_distance(spec.instances[index], frame.coords, frame.half_box)


def calc_jax_pair_distance_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the end-to-end distance of every instance using jax."""
    from ..jaxutil import pair_distances

    ids = spec.instances[index]
    return np.asarray(
        pair_distances(frame.coords, ids[:, 0], ids[:, -1], frame.half_box),
        dtype=float,
    )


def calc_angle_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the angle of every instance."""
    return geometry.angle(spec.instances[index], frame.coords, frame.half_box)


def calc_dihedral_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the dihedral angle of every instance."""
    return geometry.dihedral(spec.instances[index], frame.coords, frame.half_box)


def calc_radius_of_gyration_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the radius of gyration of every molecule of the interaction."""
    params = spec.payload
    if not isinstance(params, MoleculeParams):
        raise ConfigurationError("Radius of gyration sampling requires molecules.")
    return np.array(
        [
            geometry.radius_of_gyration(
                params.molecule_sites[mol], frame.coords, frame.half_box
            )
            for mol in spec.instances[index][:, 0]
        ]
    )


def calc_helical_sampling(
    spec: InteractionClassSpec, index: int, frame: Frame
) -> np.ndarray:
    """Sample the helical fraction of every molecule of the interaction."""
    params = spec.payload
    if not isinstance(params, HelicalParams) or params.r0 is None:
        raise ConfigurationError("Helical sampling requires r0 and sigma2 values.")
    r0 = params.r0[index]
    sigma2 = params.sigma2[index]  # type: ignore [index]
    return np.array(
        [
            geometry.helical_fraction(
                params.partners[mol], frame.coords, r0, sigma2, frame.half_box
            )
            for mol in spec.instances[index][:, 0]
        ]
    )


# None matches any subtype
EVALUATOR_TABLE: Final[Dict[ClassType, Dict[Optional[int], Evaluator]]] = {
    ClassType.ONE_BODY: {None: calc_nothing},
    ClassType.PAIR_NONBONDED: {None: calc_pair_distance_sampling},
    ClassType.PAIR_BONDED: {None: calc_pair_distance_sampling},
    ClassType.ANGULAR: {0: calc_angle_sampling, 1: calc_pair_distance_sampling},
    ClassType.DIHEDRAL: {0: calc_dihedral_sampling, 1: calc_pair_distance_sampling},
    ClassType.R13: {0: calc_nothing, 1: calc_pair_distance_sampling},
    ClassType.R14: {0: calc_nothing, 1: calc_pair_distance_sampling},
    ClassType.R15: {0: calc_nothing, 1: calc_pair_distance_sampling},
    ClassType.RADIUS_OF_GYRATION: {0: calc_nothing, 1: calc_radius_of_gyration_sampling},
    ClassType.HELICAL: {0: calc_nothing, 1: calc_helical_sampling},
    ClassType.DENSITY: {subtype: calc_nothing for subtype in range(5)},
    ClassType.THREE_BODY_NONBONDED: {None: calc_nothing},
}


def select_evaluator(kind: InteractionKind, use_jax: bool = False) -> Evaluator:
    """Select the coordinate evaluator of an interaction class.

    Arguments:
    ---------
    kind:
        InteractionKind of the class.
    use_jax:
        If truthy, pair distances are computed with jax.

    Returns:
    -------
    Evaluator callable; see EVALUATOR_TABLE.

    Raises:
    ------
    ConfigurationError if the subtype is not recognized for the class.
    """
    by_subtype = EVALUATOR_TABLE[kind.class_type]
    if None in by_subtype:
        evaluator = by_subtype[None]
    elif kind.subtype in by_subtype:
        evaluator = by_subtype[kind.subtype]
    else:
        raise ConfigurationError(
            "Unrecognized {} class subtype!".format(kind.class_type.value)
        )
    if use_jax and evaluator is calc_pair_distance_sampling:
        return calc_jax_pair_distance_sampling
    return evaluator


def distribution_eligible(kind: InteractionKind) -> bool:
    """Whether raw sample files can be written for an interaction class."""
    if kind.class_type in (
        ClassType.PAIR_NONBONDED,
        ClassType.PAIR_BONDED,
        ClassType.ANGULAR,
        ClassType.DIHEDRAL,
    ):
        return True
    if kind.class_type in DISTANCE_CLASSES or kind.class_type in MOLECULE_CLASSES:
        return kind.subtype == 1
    if kind.class_type == ClassType.DENSITY:
        return kind.subtype > 0
    return False


class InteractionClassComputer:
    """Samples the coordinates of an interaction class at each frame.

    Attributes:
    ----------
    spec:
        The InteractionClassSpec being sampled.
    evaluator:
        Coordinate evaluator selected with select_evaluator.
    index_among_defined:
        Index of the defined interaction currently being sampled.
    """

    def __init__(self, spec: InteractionClassSpec, use_jax: bool = False) -> None:
        """Initialize.

        Raises:
        ------
        ConfigurationError if the class subtype is not recognized.
        """
        self.spec = spec
        self.evaluator = select_evaluator(spec.kind, use_jax=use_jax)
        self.index_among_defined = 0

    def sample(self, frame: Frame) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield (index_among_defined, samples) for every defined interaction."""
        for index in range(self.spec.n_defined):
            if len(self.spec.instances[index]) == 0:
                continue
            self.index_among_defined = index
            values = self.evaluator(self.spec, index, frame)
            if values is not None:
                yield index, values


class DensityClassComputer(InteractionClassComputer):
    """Computer for density classes.

    Densities are not sampled through the per-interaction evaluator. Instead,
    density values of the whole class are accumulated once per frame by a
    DensityEngine and then read for every site of each defined interaction.

    Attributes:
    ----------
    engine:
        DensityEngine of the class, or None if the subtype disables densities.
    """

    def __init__(self, spec: InteractionClassSpec, site_types: np.ndarray) -> None:
        """Initialize.

        Arguments:
        ---------
        spec:
            Density InteractionClassSpec with kernel widths set.
        site_types:
            Type of every site in the system.
        """
        super().__init__(spec)
        self.engine: Optional[DensityEngine] = None
        if spec.class_subtype != 0:
            self.engine = DensityEngine(spec, site_types)

    def process_density(self, frame: Frame) -> Iterator[Tuple[int, np.ndarray]]:
        """Accumulate densities for a frame and yield them per interaction."""
        if self.engine is None:
            return
        self.engine.accumulate(frame.coords, frame.half_box)
        for index in range(self.spec.n_defined):
            sites = self.spec.instances[index][:, 0]
            if len(sites) == 0:
                continue
            self.index_among_defined = index
            yield index, self.engine.density_values[index, sites]

    def sample(self, frame: Frame) -> Iterator[Tuple[int, np.ndarray]]:
        """Yield (index_among_defined, densities) for every defined interaction."""
        yield from super().sample(frame)
        yield from self.process_density(frame)
