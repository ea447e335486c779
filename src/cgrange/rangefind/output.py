"""Finalizes sampled ranges and writes them to rmin*.in files.

Each row of a range file has the form

    <name> <lower> <upper> {fm|none} [extra parameters]

where `none` marks an interaction that was never sampled (or that was only
sampled beyond the nonbonded cutoff) and whose bounds are written as -1.
Density rows append the kernel width (and switching distance for the tanh
kernel) and helical rows append r0 and sigma2. One body rows only hold the name
and `fm`.
"""
import logging
from pathlib import Path
from typing import Optional, Sequence, Union, List, Dict, Final, TextIO
from ..constants import VERYLARGE, VERYSMALL_F, UNSAMPLED
from ..interactions import (
    InteractionClassSpec,
    ClassType,
    DensityParams,
    HelicalParams,
)
from ..interactions.kinds import DISTANCE_CLASSES

logger = logging.getLogger(__name__)

NONBONDED_RANGE_FILENAME: Final = "rmin.in"
BONDED_RANGE_FILENAME: Final = "rmin_b.in"
ONE_BODY_RANGE_FILENAME: Final = "rmin_1.in"
DISTANCE_RANGE_FILENAME: Final = "rmin_r.in"
DENSITY_RANGE_FILENAME: Final = "rmin_den.in"
HELICAL_RANGE_FILENAME: Final = "rmin_hel.in"
RADIUS_OF_GYRATION_RANGE_FILENAME: Final = "rmin_rg.in"


def range_filename(spec: InteractionClassSpec) -> Optional[str]:
    """Return the range file an interaction class is written to.

    Returns None for classes that do not produce range output.
    """
    class_type = spec.class_type
    if class_type == ClassType.ONE_BODY:
        return ONE_BODY_RANGE_FILENAME if spec.class_subtype != 0 else None
    if class_type == ClassType.PAIR_NONBONDED:
        return NONBONDED_RANGE_FILENAME
    if class_type in DISTANCE_CLASSES:
        return DISTANCE_RANGE_FILENAME if spec.class_subtype > 0 else None
    if class_type == ClassType.HELICAL:
        return HELICAL_RANGE_FILENAME if spec.class_subtype > 0 else None
    if class_type == ClassType.RADIUS_OF_GYRATION:
        return RADIUS_OF_GYRATION_RANGE_FILENAME if spec.class_subtype > 0 else None
    if class_type == ClassType.DENSITY:
        return DENSITY_RANGE_FILENAME if spec.class_subtype > 0 else None
    if class_type == ClassType.THREE_BODY_NONBONDED:
        return None
    return BONDED_RANGE_FILENAME


def finalize_ranges(spec: InteractionClassSpec) -> None:
    """Replace sentinel bounds and clamp nonbonded bounds of matched interactions.

    Interactions whose upper bound is still the unset sentinel get bounds
    (-1, -1). Pair nonbonded interactions whose lower bound lies beyond the
    cutoff also get (-1, -1); otherwise their upper bound is clamped to the
    cutoff. Other classes are not clamped.
    """
    for index in range(spec.n_defined):
        if spec.defined_to_matched_index_map[index] <= 0:
            continue
        if abs(spec.upper_cutoffs[index] + VERYLARGE) < VERYSMALL_F:
            spec.lower_cutoffs[index] = UNSAMPLED
            spec.upper_cutoffs[index] = UNSAMPLED
        elif spec.class_type == ClassType.PAIR_NONBONDED:
            if spec.lower_cutoffs[index] > spec.cutoff:
                spec.lower_cutoffs[index] = UNSAMPLED
                spec.upper_cutoffs[index] = UNSAMPLED
            elif spec.upper_cutoffs[index] > spec.cutoff:
                spec.upper_cutoffs[index] = spec.cutoff


def format_range_row(spec: InteractionClassSpec, index: int) -> str:
    """Format the range file row of a defined interaction.

    finalize_ranges should be called before formatting.
    """
    name = spec.interaction_name(index, " ")
    if spec.class_type == ClassType.ONE_BODY:
        return "{} fm".format(name)
    lower = spec.lower_cutoffs[index]
    upper = spec.upper_cutoffs[index]
    fields = [name, "{:f}".format(lower), "{:f}".format(upper)]
    fields.append("none" if upper == UNSAMPLED else "fm")
    params = spec.payload
    if isinstance(params, DensityParams) and params.sigma is not None:
        if spec.class_subtype in (1, 4):
            fields.append("{:f}".format(params.sigma[index]))
        elif spec.class_subtype == 2:
            fields.append("{:f}".format(params.sigma[index]))
            fields.append("{:f}".format(params.switch[index]))  # type: ignore [index]
    if isinstance(params, HelicalParams) and params.r0 is not None:
        fields.append("{:f}".format(params.r0[index]))
        fields.append("{:f}".format(params.sigma2[index]))  # type: ignore [index]
    return " ".join(fields)


def _write_class_rows(spec: InteractionClassSpec, handle: TextIO) -> None:
    if spec.class_type != ClassType.ONE_BODY:
        finalize_ranges(spec)
    for index in range(spec.n_defined):
        if spec.defined_to_matched_index_map[index] > 0:
            handle.write(format_range_row(spec, index) + "\n")


def write_range_files(
    classes: Sequence[InteractionClassSpec], directory: Union[str, Path] = "."
) -> List[Path]:
    """Finalize the ranges of every class and write the range files.

    rmin.in and rmin_b.in are always created. The other range files are only
    created when a class that writes to them is present with a nonzero subtype.

    Arguments:
    ---------
    classes:
        InteractionClassSpec instances, written in order.
    directory:
        Directory the files are written to.

    Returns:
    -------
    List of the paths written.
    """
    directory = Path(directory)
    by_file: Dict[str, List[InteractionClassSpec]] = {
        NONBONDED_RANGE_FILENAME: [],
        BONDED_RANGE_FILENAME: [],
    }
    for spec in classes:
        filename = range_filename(spec)
        if filename is not None:
            by_file.setdefault(filename, []).append(spec)
    written = []
    for filename, specs in by_file.items():
        path = directory / filename
        with path.open("w") as handle:
            for spec in specs:
                _write_class_rows(spec, handle)
        logger.info("Wrote interaction ranges to %s.", path)
        written.append(path)
    return written
