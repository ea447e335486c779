"""Provides RangeFinder, which samples interaction ranges over a trajectory."""
import logging
from contextlib import ExitStack
from pathlib import Path
from typing import Union, List
from ..constants import HELICAL_PARAMETER_FILENAME, DENSITY_PARAMETER_FILENAME
from ..errors import ConfigurationError
from ..interactions import (
    CGModel,
    InteractionClassSpec,
    ClassType,
    DensityParams,
    HelicalParams,
    read_helical_parameter_file,
    read_density_parameter_file,
)
from ..trajectory import Trajectory
from .accumulator import RangeAccumulator, DistributionWriter
from .dispatch import (
    InteractionClassComputer,
    DensityClassComputer,
    distribution_eligible,
    select_evaluator,
)

logger = logging.getLogger(__name__)


class RangeFinder:
    """Determines the sampled range of every interaction of a model.

    All configuration is validated when the instance is created and when run
    starts, before any output file is opened, so configuration errors never
    leave partial output behind.

    Attributes:
    ----------
    model:
        CGModel whose interaction classes are sampled.
    computers:
        One InteractionClassComputer per interaction class.
    """

    def __init__(
        self,
        model: CGModel,
        parameter_dir: Union[str, Path] = ".",
        use_jax: bool = False,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        model:
            CGModel to sample.
        parameter_dir:
            Directory containing hel.prm and den.prm. They are only read if the
            corresponding parameters are not already set on the class payloads.
        use_jax:
            If truthy, pair distances are evaluated with jax.

        Raises:
        ------
        ConfigurationError on unrecognized class subtypes, missing or malformed
        parameter files, or invalid density parameters.
        """
        self.model = model
        self.parameter_dir = Path(parameter_dir)
        self.use_jax = use_jax
        self.computers: List[InteractionClassComputer] = [
            self._make_computer(spec) for spec in model
        ]

    def _make_computer(self, spec: InteractionClassSpec) -> InteractionClassComputer:
        select_evaluator(spec.kind)
        if spec.class_type == ClassType.HELICAL and spec.class_subtype == 1:
            params = spec.payload
            if not isinstance(params, HelicalParams):
                raise ConfigurationError("Helical classes require HelicalParams.")
            if params.r0 is None or params.sigma2 is None:
                params.r0, params.sigma2 = read_helical_parameter_file(
                    self.parameter_dir / HELICAL_PARAMETER_FILENAME, spec.n_defined
                )
        if spec.class_type == ClassType.DENSITY:
            params = spec.payload
            if not isinstance(params, DensityParams):
                raise ConfigurationError("Density classes require DensityParams.")
            if spec.class_subtype != 0 and params.sigma is None:
                params.sigma, params.switch = read_density_parameter_file(
                    self.parameter_dir / DENSITY_PARAMETER_FILENAME, spec.n_defined
                )
            return DensityClassComputer(spec, self.model.topology.site_types)
        return InteractionClassComputer(spec, use_jax=self.use_jax)

    def check_dimension(self, n_dim: int) -> None:
        """Check that every sampled coordinate is defined in n_dim dimensions.

        Raises:
        ------
        ConfigurationError if dihedral angles are requested for a system that
        is not 3 dimensional.
        """
        for spec in self.model:
            if (
                spec.class_type == ClassType.DIHEDRAL
                and spec.class_subtype == 0
                and spec.n_defined > 0
                and n_dim != 3
            ):
                raise ConfigurationError(
                    "Dihedral calculations are only implemented for "
                    "3-dimensional systems."
                )

    def check_trajectory(self, trajectory: Trajectory) -> None:
        """Check that a trajectory can be sampled with the model.

        Raises:
        ------
        ConfigurationError if dihedral angles are requested for a system that
        is not 3 dimensional; ValueError if the trajectory and the topology
        have different numbers of sites.
        """
        self.check_dimension(trajectory.n_dim)
        if trajectory.n_sites != self.model.topology.n_sites:
            raise ValueError("Trajectory and topology have different numbers of sites.")

    def run(self, trajectory: Trajectory, output_dir: Union[str, Path] = ".") -> None:
        """Sample the ranges of all interactions over a trajectory.

        Bounds are reset before sampling and are stored in the lower_cutoffs
        and upper_cutoffs arrays of each class. Raw samples are written to
        .dist files in output_dir for classes that request them.

        Arguments:
        ---------
        trajectory:
            Trajectory to sample.
        output_dir:
            Directory for .dist files.
        """
        self.check_trajectory(trajectory)
        output_dir = Path(output_dir)
        for spec in self.model:
            spec.reset_ranges()
        with ExitStack() as stack:
            accumulators = []
            for computer in self.computers:
                spec = computer.spec
                writer = None
                if (
                    spec.writes_distributions
                    and distribution_eligible(spec.kind)
                    and spec.n_defined > 0
                ):
                    output_dir.mkdir(parents=True, exist_ok=True)
                    writer = stack.enter_context(DistributionWriter(spec, output_dir))
                accumulators.append(RangeAccumulator(spec, writer))
            for frame in trajectory:
                for computer, accumulator in zip(self.computers, accumulators):
                    for index, values in computer.sample(frame):
                        accumulator.update(index, values)
        logger.info("Sampled interaction ranges over %d frames.", len(trajectory))
