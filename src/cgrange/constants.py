"""Provides named constants shared across the package.

None of these values are mutated at runtime.
"""
from typing import Final

# lower/upper cutoffs are reset to (VERYLARGE, -VERYLARGE) before sampling
VERYLARGE: Final = 1.0e6
VERYSMALL: Final = 1.0e-14
# tolerance used when checking for the unset upper cutoff
VERYSMALL_F: Final = 1.0e-6

# marks a never sampled interaction in range files
UNSAMPLED: Final = -1.0

# added before flooring a sample into its histogram bin
BIN_EPSILON: Final = 1.0e-5

# potential assigned to empty histogram bins during Boltzmann inversion
ZERO_COUNT_POTENTIAL: Final = 100.0

DEGREES_PER_RADIAN: Final = 180.0 / 3.141592653589793

HELICAL_PARAMETER_FILENAME: Final = "hel.prm"
DENSITY_PARAMETER_FILENAME: Final = "den.prm"

DIST_SUFFIX: Final = ".dist"
HIST_SUFFIX: Final = ".hist"
BI_SUFFIX: Final = ".bi"
