"""Provides range finding over trajectories and range file output."""
# __init__ doesn't use the imported objects
# ruff: noqa: F401
from .dispatch import (
    EVALUATOR_TABLE,
    select_evaluator,
    distribution_eligible,
    InteractionClassComputer,
    DensityClassComputer,
)
from .accumulator import RangeAccumulator, DistributionWriter, distribution_path
from .finder import RangeFinder
from .output import (
    finalize_ranges,
    format_range_row,
    range_filename,
    write_range_files,
)
