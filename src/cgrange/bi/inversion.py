r"""Provides Boltzmann inversion of histograms into initial potentials.

For each histogram bin at r with n counts, the potential is U = -kT ln(p) where
p is the normalized count:

    pair nonbonded:  n * 3 / (4 pi (r^3 - (r-w)^3)) * 2 * norm * V / num_pairs
    pair bonded:     same with num_pairs = 2 and V = 1
    otherwise:       n * 2 * norm

Empty bins get a potential of 100 and potentials are clipped to
[-VERYLARGE, VERYLARGE]. The potentials of each class are then fit with a
linear spline basis in a single least squares solve.
"""

import logging
from pathlib import Path
from typing import NamedTuple, Optional, Sequence, Union, Dict, List
import numpy as np
from ..constants import VERYLARGE, ZERO_COUNT_POTENTIAL, HIST_SUFFIX, BI_SUFFIX
from ..histogram import read_histogram
from ..interactions import InteractionClassSpec, ClassType
from .basis import LinearSplineBasis
from .matrix import BIMatrix, SolverOptions, DEFAULT_SOLVER_OPTIONS

logger = logging.getLogger(__name__)

# knot spacing, in histogram bins, used when none is given
DEFAULT_BINS_PER_KNOT = 5


class BISolution(NamedTuple):
    """Linear spline potential of a single defined interaction."""

    name: str
    knots: np.ndarray
    coefficients: np.ndarray


def count_pairs(type_counts: np.ndarray, type1: int, type2: int) -> float:
    """Return the number of ordered site pairs between two types.

    Pairs of a site with itself are excluded.
    """
    num_pairs = float(type_counts[type1] * type_counts[type2])
    if type1 == type2:
        num_pairs -= type_counts[type1]
    return num_pairs


def boltzmann_potentials(
    centers: np.ndarray,
    counts: np.ndarray,
    class_type: ClassType,
    binwidth: float,
    kbt: float = 1.0,
    normalization: float = 1.0,
    volume: float = 1.0,
    num_pairs: float = 2.0,
) -> np.ndarray:
    """Convert histogram counts to potentials.

    Arguments:
    ---------
    centers:
        Bin centers.
    counts:
        Bin counts.
    class_type:
        ClassType of the interaction; selects the normalization.
    binwidth:
        Bin width of the histogram.
    kbt:
        Boltzmann constant times temperature.
    normalization:
        Multiplier applied to the counts.
    volume:
        Box volume; only used for pair nonbonded interactions.
    num_pairs:
        Number of site pairs; only used for pair nonbonded interactions.

    Returns:
    -------
    Array of potentials, one per bin.
    """
    centers = np.asarray(centers, dtype=float)
    counts = np.asarray(counts, dtype=float)
    shell = 4.0 * np.pi * (centers**3 - (centers - binwidth) ** 3) / 3.0
    potentials = np.full(len(counts), ZERO_COUNT_POTENTIAL)
    sampled = counts > 0
    with np.errstate(divide="ignore"):
        if class_type == ClassType.PAIR_NONBONDED:
            normalized = counts / shell * 2.0 * normalization * volume / num_pairs
        elif class_type == ClassType.PAIR_BONDED:
            normalized = counts / shell * 2.0 * normalization / 2.0
        else:
            normalized = counts * 2.0 * normalization / 1.0
        potentials[sampled] = -kbt * np.log(normalized[sampled])
    return np.clip(potentials, -VERYLARGE, VERYLARGE)


def _knot_spacing(spec: InteractionClassSpec, knot_spacing: Optional[float]) -> float:
    if knot_spacing is not None:
        return knot_spacing
    return DEFAULT_BINS_PER_KNOT * spec.fm_binwidth


def invert_class(
    spec: InteractionClassSpec,
    matrix: BIMatrix,
    directory: Union[str, Path] = ".",
    type_counts: Optional[np.ndarray] = None,
    volume: float = 1.0,
    knot_spacing: Optional[float] = None,
) -> List[BISolution]:
    """Fit the Boltzmann inverted potentials of every interaction of a class.

    The histograms of the class must have been written to directory. The
    column offset of the class is set to zero during the solve and restored
    afterwards.

    Arguments:
    ---------
    spec:
        Class with finalized ranges.
    matrix:
        BIMatrix holding kbt, normalization and solver options.
    directory:
        Directory containing the .hist files.
    type_counts:
        Number of sites of each type. Required for pair nonbonded classes.
    volume:
        Box volume used for pair nonbonded classes.
    knot_spacing:
        Spline knot spacing; defaults to a multiple of the class bin width.

    Returns:
    -------
    List with one BISolution per defined interaction.
    """
    if spec.class_type == ClassType.PAIR_NONBONDED and type_counts is None:
        raise ValueError("type_counts are needed to invert pair nonbonded classes.")
    directory = Path(directory)
    saved_column_index = spec.interaction_class_column_index
    spec.interaction_class_column_index = 0
    try:
        basis = LinearSplineBasis(
            spec.lower_cutoffs,
            spec.upper_cutoffs,
            _knot_spacing(spec, knot_spacing),
        )
        spec.interaction_column_indices = basis.column_offsets()
        matrix.initialize(int(spec.interaction_column_indices[-1]))
        for index in range(spec.n_defined):
            n_entries = int(
                (spec.upper_cutoffs[index] - spec.lower_cutoffs[index])
                / spec.fm_binwidth
            )
            if n_entries <= 0 or basis.n_coef(index) == 0:
                continue
            num_pairs = 2.0
            if spec.class_type == ClassType.PAIR_NONBONDED:
                type1, type2 = spec.type_indices[index]
                num_pairs = count_pairs(type_counts, type1, type2)  # type: ignore [arg-type]
            centers, counts = read_histogram(
                directory / (spec.basename(index) + HIST_SUFFIX), n_entries
            )
            potentials = boltzmann_potentials(
                centers,
                counts,
                spec.class_type,
                spec.fm_binwidth,
                kbt=matrix.kbt,
                normalization=matrix.normalization,
                volume=volume,
                num_pairs=num_pairs,
            )
            offset = (
                spec.interaction_class_column_index
                + spec.interaction_column_indices[index]
            )
            for r, potential in zip(centers, potentials):
                first, values = basis.calculate_basis_fn_vals(index, r)
                matrix.accumulate_matching_forces(int(offset + first), values)
                matrix.accumulate_target_force_element(potential)
        coefs = matrix.solve()
    finally:
        spec.interaction_class_column_index = saved_column_index
    solutions = []
    for index in range(spec.n_defined):
        start = spec.interaction_column_indices[index]
        stop = spec.interaction_column_indices[index + 1]
        solutions.append(
            BISolution(
                name=spec.interaction_name(index),
                knots=basis.knots[index],
                coefficients=np.zeros(0) if coefs is None else coefs[start:stop],
            )
        )
    return solutions


def write_bi_table(
    spec: InteractionClassSpec,
    solutions: Sequence[BISolution],
    directory: Union[str, Path] = ".",
) -> List[Path]:
    """Tabulate fitted potentials at their knots to <basename>.bi files."""
    directory = Path(directory)
    written = []
    for index, solution in enumerate(solutions):
        if len(solution.knots) == 0:
            continue
        path = directory / (spec.basename(index) + BI_SUFFIX)
        np.savetxt(
            path,
            np.stack([solution.knots, solution.coefficients], axis=1),
            fmt="%f",
            delimiter="\t",
            header="r\tpotential",
        )
        written.append(path)
    return written


def calculate_bi(
    classes: Sequence[InteractionClassSpec],
    directory: Union[str, Path] = ".",
    type_counts: Optional[np.ndarray] = None,
    volume: float = 1.0,
    kbt: float = 1.0,
    normalization: float = 1.0,
    knot_spacing: Optional[float] = None,
    l2_regularization: float = 0.0,
    solver_args: SolverOptions = DEFAULT_SOLVER_OPTIONS,
    write_tables: bool = True,
) -> Dict[str, List[BISolution]]:
    """Fit initial potentials for every class with parameter distributions.

    Classes without distributions, one body classes and three body nonbonded
    classes are skipped.

    Arguments:
    ---------
    classes:
        InteractionClassSpec instances with finalized ranges and histograms.
    directory:
        Directory holding the histograms; .bi tables are written here.
    type_counts:
        Number of sites of each type.
    volume:
        Box volume.
    kbt:
        Boltzmann constant times temperature.
    normalization:
        Multiplier applied to histogram counts.
    knot_spacing:
        Spline knot spacing. Defaults to a multiple of each class bin width.
    l2_regularization:
        l2 penalty of the least squares fit.
    solver_args:
        Options passed to the quadratic programming solver.
    write_tables:
        If truthy, fitted potentials are written to .bi files.

    Returns:
    -------
    Dictionary mapping class names to lists of BISolution.
    """
    matrix = BIMatrix(
        kbt=kbt,
        normalization=normalization,
        l2_regularization=l2_regularization,
        solver_args=solver_args,
    )
    results = {}
    for spec in classes:
        if spec.output_parameter_distribution == 0:
            continue
        if spec.class_type in (ClassType.ONE_BODY, ClassType.THREE_BODY_NONBONDED):
            continue
        logger.info("Boltzmann inverting %s interactions.", spec.full_name)
        solutions = invert_class(
            spec,
            matrix,
            directory=directory,
            type_counts=type_counts,
            volume=volume,
            knot_spacing=knot_spacing,
        )
        if write_tables:
            write_bi_table(spec, solutions, directory)
        results[spec.full_name] = solutions
    return results
