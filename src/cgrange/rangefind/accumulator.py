"""Provides running range tracking and raw sample output for interaction classes."""
from contextlib import ExitStack
from pathlib import Path
import warnings
from typing import Union, Optional, List, TextIO, Any
import numpy as np
from ..constants import DIST_SUFFIX
from ..interactions import InteractionClassSpec, ClassType


def distribution_path(
    spec: InteractionClassSpec, index: int, directory: Union[str, Path] = "."
) -> Path:
    """Return the path of the raw sample file of a defined interaction."""
    return Path(directory) / (spec.basename(index) + DIST_SUFFIX)


class DistributionWriter:
    """Raw sample files of every defined interaction of a class.

    Files are opened together on entering the context and are closed together
    on leaving it, including when an exception propagates. Each file holds one
    sample per line.
    """

    def __init__(
        self, spec: InteractionClassSpec, directory: Union[str, Path] = "."
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        spec:
            Class whose defined interactions receive a file each.
        directory:
            Directory the .dist files are created in.
        """
        self.spec = spec
        self.directory = Path(directory)
        self._stack: Optional[ExitStack] = None
        self._handles: List[TextIO] = []

    def __enter__(self) -> "DistributionWriter":
        """Open one file per defined interaction."""
        with ExitStack() as stack:
            self._handles = [
                stack.enter_context(distribution_path(self.spec, i, self.directory).open("w"))
                for i in range(self.spec.n_defined)
            ]
            self._stack = stack.pop_all()
        return self

    def __exit__(self, *args: Any) -> None:
        """Close all files."""
        self.close()

    def close(self) -> None:
        """Close all files."""
        if self._stack is not None:
            self._stack.close()
            self._stack = None
        self._handles = []

    def write(self, index: int, values: np.ndarray) -> None:
        """Append samples to the file of a defined interaction."""
        if len(values):
            np.savetxt(self._handles[index], np.ravel(values), fmt="%f")


class RangeAccumulator:
    """Folds sampled coordinates into the bounds of an InteractionClassSpec.

    Bounds are stored in the lower_cutoffs and upper_cutoffs arrays of the InteractionClassSpec.
    If a DistributionWriter is given, samples are also written to it; samples of
    pair nonbonded interactions are only written when they lie below the
    nominal cutoff, so the recorded distribution only covers the range the
    interaction is eventually defined over.
    """

    def __init__(
        self, spec: InteractionClassSpec, writer: Optional[DistributionWriter] = None
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        spec:
            Class whose bounds are updated.
        writer:
            Optional sink for raw samples.
        """
        self.spec = spec
        self.writer = writer

    def update(self, index: int, values: np.ndarray) -> None:
        """Fold samples of a defined interaction into its bounds.

        Arguments:
        ---------
        index:
            Index of the defined interaction.
        values:
            Samples of the interaction's coordinate.
        """
        values = np.asarray(values, dtype=float).ravel()
        finite = np.isfinite(values)
        if not np.all(finite):
            warnings.warn(
                "Dropping {} non-finite samples of {} interaction {}.".format(
                    np.sum(~finite), self.spec.full_name, self.spec.interaction_name(index)
                ),
                RuntimeWarning,
                stacklevel=2,
            )
            values = values[finite]
        if values.size == 0:
            return
        self.spec.lower_cutoffs[index] = np.fmin(
            self.spec.lower_cutoffs[index], values.min()
        )
        self.spec.upper_cutoffs[index] = np.fmax(
            self.spec.upper_cutoffs[index], values.max()
        )
        if self.writer is None:
            return
        if self.spec.class_type == ClassType.PAIR_NONBONDED:
            values = values[values < self.spec.cutoff]
        self.writer.write(index, values)
