r"""Provides the entry points for range finding and initial potential estimation.

find_ranges samples the range of every interaction of a coarse-grained model
over a trajectory and writes the range files (rmin.in, rmin_b.in, ...) together
with histograms of the sampled coordinates. initial_potentials additionally
Boltzmann inverts these histograms into linear spline potentials that can seed
a force matching calculation.
"""

from pathlib import Path
from typing import Union, Optional, Dict, Any, Final
from .bi import calculate_bi, SolverOptions, DEFAULT_SOLVER_OPTIONS
from .histogram import (
    generate_parameter_distribution_histograms,
    remove_distribution_files,
)
from .interactions import CGModel
from .rangefind import RangeFinder, write_range_files, distribution_eligible
from .trajectory import Trajectory

RANGES_KNAME: Final = "ranges"
RANGE_FILES_KNAME: Final = "range_files"
HISTOGRAM_FILES_KNAME: Final = "histogram_files"
POTENTIALS_KNAME: Final = "potentials"


def find_ranges(
    model: CGModel,
    trajectory: Trajectory,
    output_dir: Union[str, Path] = ".",
    parameter_dir: Union[str, Path, None] = None,
    use_jax: bool = False,
) -> Dict[str, Any]:
    r"""Determine and write the sampled range of every interaction.

    Arguments:
    ---------
    model:
        CGModel describing the topology and interaction classes.
    trajectory:
        Trajectory whose sites correspond to the sites of model.topology.
    output_dir:
        Directory range files, raw sample files and histograms are written to.
        Created if needed.
    parameter_dir:
        Directory containing hel.prm and den.prm. Defaults to output_dir.
    use_jax:
        If truthy, pair distances are computed with jax.

    Returns:
    -------
    Dictionary with the following keys (see the *_KNAME constants):
        ranges:
            maps each class name to a tuple of (lower, upper) arrays of its
            defined interactions.
        range_files:
            list of the range files written.
        histogram_files:
            list of the histogram files written.
    """
    output_dir = Path(output_dir)
    if parameter_dir is None:
        parameter_dir = output_dir
    # configuration errors are raised here, before any file is written
    finder = RangeFinder(model, parameter_dir=parameter_dir, use_jax=use_jax)
    finder.check_trajectory(trajectory)
    output_dir.mkdir(parents=True, exist_ok=True)
    finder.run(trajectory, output_dir)
    range_files = write_range_files(model.interaction_classes, output_dir)
    histogram_files = []
    for spec in model:
        if not (
            spec.writes_distributions
            and distribution_eligible(spec.kind)
            and spec.n_defined > 0
        ):
            continue
        histogram_files.extend(
            generate_parameter_distribution_histograms(spec, output_dir)
        )
        remove_distribution_files(spec, output_dir)
    return {
        RANGES_KNAME: {
            spec.full_name: (spec.lower_cutoffs.copy(), spec.upper_cutoffs.copy())
            for spec in model
        },
        RANGE_FILES_KNAME: range_files,
        HISTOGRAM_FILES_KNAME: histogram_files,
    }


def initial_potentials(
    model: CGModel,
    trajectory: Trajectory,
    output_dir: Union[str, Path] = ".",
    parameter_dir: Union[str, Path, None] = None,
    use_jax: bool = False,
    kbt: float = 1.0,
    normalization: Optional[float] = None,
    knot_spacing: Optional[float] = None,
    l2_regularization: float = 0.0,
    solver_args: SolverOptions = DEFAULT_SOLVER_OPTIONS,
) -> Dict[str, Any]:
    r"""Find interaction ranges and Boltzmann invert their distributions.

    Only classes with output_parameter_distribution set to 1 or 2 are inverted.

    Arguments:
    ---------
    model:
        CGModel describing the topology and interaction classes.
    trajectory:
        Trajectory to sample.
    output_dir:
        See find_ranges. Potential tables (.bi files) are also written here.
    parameter_dir:
        See find_ranges.
    use_jax:
        See find_ranges.
    kbt:
        Boltzmann constant times temperature, in the energy units of the
        resulting potentials.
    normalization:
        Multiplier applied to histogram counts. Defaults to the inverse of the
        number of frames.
    knot_spacing:
        Spline knot spacing. Defaults to a multiple of each class bin width.
    l2_regularization:
        l2 penalty applied to the spline coefficients.
    solver_args:
        Passed as options to the quadratic programming solver.

    Returns:
    -------
    Dictionary with the keys of find_ranges and the additional key:
        potentials:
            maps each inverted class name to a list of BISolution.
    """
    if len(trajectory) == 0:
        raise ValueError("trajectory has no frames.")
    results = find_ranges(
        model,
        trajectory,
        output_dir=output_dir,
        parameter_dir=parameter_dir,
        use_jax=use_jax,
    )
    if normalization is None:
        normalization = 1.0 / len(trajectory)
    results[POTENTIALS_KNAME] = calculate_bi(
        model.interaction_classes,
        directory=output_dir,
        type_counts=model.topology.type_counts(),
        volume=trajectory.volume(),
        kbt=kbt,
        normalization=normalization,
        knot_spacing=knot_spacing,
        l2_regularization=l2_regularization,
        solver_args=solver_args,
    )
    return results
