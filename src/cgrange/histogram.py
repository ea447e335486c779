"""Builds histograms of sampled coordinates from raw sample (.dist) files.

Histograms span the finalized range of each interaction with the bin width of
its class. They are written to `<basename>.hist` files, which are read back
during Boltzmann inversion.
"""
import logging
import warnings
from pathlib import Path
from typing import NamedTuple, Optional, Union, List, Tuple
import numpy as np
from .constants import BIN_EPSILON, HIST_SUFFIX, DIST_SUFFIX
from .interactions import InteractionClassSpec

logger = logging.getLogger(__name__)


class Histogram(NamedTuple):
    """Bin centers and counts of a histogram.

    n_dropped counts the samples that fell outside of the bins.
    """

    centers: np.ndarray
    counts: np.ndarray
    n_dropped: int


def build_histogram(
    samples: np.ndarray, lower: float, upper: float, binwidth: float
) -> Histogram:
    """Histogram samples over [lower, upper].

    The number of bins is (upper-lower)/binwidth rounded to the nearest integer.
    A sample v lands in bin floor((v - lower + 1e-5)/binwidth). Samples outside
    of the bins are dropped; samples more than one bin past the last bin
    additionally trigger a RuntimeWarning.

    Arguments:
    ---------
    samples:
        Samples to histogram.
    lower:
        Lower edge of the first bin.
    upper:
        Approximate upper edge of the last bin.
    binwidth:
        Positive width of each bin.

    Returns:
    -------
    Histogram instance.
    """
    num_bins = max(int((upper - lower) / binwidth + 0.5), 0)
    centers = lower + 0.5 * binwidth + binwidth * np.arange(num_bins)
    samples = np.ravel(np.asarray(samples, dtype=float))
    bins = np.floor((samples - lower + BIN_EPSILON) / binwidth).astype(int)
    inside = (bins >= 0) & (bins < num_bins)
    counts = np.bincount(bins[inside], minlength=num_bins)
    overflow = bins[bins > num_bins]
    if len(overflow):
        warnings.warn(
            "{} samples fell in out-of-bounds bins (largest bin {}, {} bins).".format(
                len(overflow), overflow.max(), num_bins
            ),
            RuntimeWarning,
            stacklevel=2,
        )
    return Histogram(
        centers=centers, counts=counts, n_dropped=int(len(samples) - inside.sum())
    )


def read_samples(path: Union[str, Path]) -> np.ndarray:
    """Read whitespace separated samples from a raw sample file."""
    return np.array(Path(path).read_text().split(), dtype=float)


def write_histogram(histogram: Histogram, path: Union[str, Path]) -> None:
    """Write a histogram as a tab separated file with a header line."""
    with Path(path).open("w") as handle:
        handle.write("#center\tcounts\n")
        for center, count in zip(histogram.centers, histogram.counts):
            handle.write("{:g}\t{}\n".format(center, count))


def read_histogram(
    path: Union[str, Path], n_entries: Optional[int] = None
) -> Tuple[np.ndarray, np.ndarray]:
    """Read bin centers and counts from a histogram file.

    Arguments:
    ---------
    path:
        Histogram file written by write_histogram.
    n_entries:
        If not None, only the first n_entries rows are returned.

    Returns:
    -------
    Tuple of arrays (centers, counts).
    """
    if n_entries is not None and n_entries <= 0:
        return np.zeros(0), np.zeros(0, dtype=int)
    lines = [
        line.split()
        for line in Path(path).read_text().splitlines()
        if line.strip() and not line.startswith("#")
    ]
    if n_entries is not None:
        if len(lines) < n_entries:
            raise ValueError(
                "{} holds {} rows but {} were requested.".format(
                    path, len(lines), n_entries
                )
            )
        lines = lines[:n_entries]
    centers = np.array([float(line[0]) for line in lines])
    counts = np.array([int(line[1]) for line in lines], dtype=int)
    return centers, counts


def generate_parameter_distribution_histograms(
    spec: InteractionClassSpec, directory: Union[str, Path] = "."
) -> List[Path]:
    """Histogram the raw samples of every defined interaction of a class.

    Ranges should be finalized first (see rangefind.finalize_ranges).

    Returns:
    -------
    List of the histogram files written.
    """
    logger.info(
        "Generating parameter distribution histogram for %s interactions.",
        spec.full_name,
    )
    directory = Path(directory)
    written = []
    for index in range(spec.n_defined):
        samples = read_samples(directory / (spec.basename(index) + DIST_SUFFIX))
        histogram = build_histogram(
            samples,
            spec.lower_cutoffs[index],
            spec.upper_cutoffs[index],
            spec.fm_binwidth,
        )
        if histogram.n_dropped:
            logger.debug(
                "Dropped %d samples of %s.",
                histogram.n_dropped,
                spec.interaction_name(index),
            )
        path = directory / (spec.basename(index) + HIST_SUFFIX)
        write_histogram(histogram, path)
        written.append(path)
    return written


def remove_distribution_files(
    spec: InteractionClassSpec, directory: Union[str, Path] = "."
) -> None:
    """Delete the raw sample files of a class if it does not keep them."""
    if spec.output_parameter_distribution != 1:
        return
    directory = Path(directory)
    for index in range(spec.n_defined):
        (directory / (spec.basename(index) + DIST_SUFFIX)).unlink(missing_ok=True)
