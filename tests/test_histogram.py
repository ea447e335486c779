r"""Tests histogram construction and histogram file handling."""
from pathlib import Path
from typing import Final
import numpy as np
import pytest
from cgrange.histogram import (
    Histogram,
    build_histogram,
    write_histogram,
    read_histogram,
)

# this seeds some portions of the randomness of these tests, but not be
# complete.
rseed: Final = 42100


def test_bins_and_centers() -> None:
    """Bin count is rounded and centers sit in the middle of each bin."""
    hist = build_histogram(np.array([0.0, 0.15, 0.95]), 0.0, 1.0, 0.1)
    assert len(hist.centers) == 10
    assert np.allclose(hist.centers, 0.05 + 0.1 * np.arange(10))
    assert hist.counts[0] == 1
    assert hist.counts[1] == 1
    assert hist.counts[9] == 1
    assert hist.n_dropped == 0


def test_counts_sum_to_samples(seed: int = rseed) -> None:
    """Samples within the range all land in a bin."""
    rng = np.random.default_rng(seed=seed)
    samples = 2.0 + 2.9 * rng.random(size=1000)
    hist = build_histogram(samples, 2.0, 5.0, 0.01)
    assert hist.counts.sum() == 1000
    assert hist.n_dropped == 0


def test_dropped_samples_warn() -> None:
    """Samples beyond the last bin are dropped; far ones emit a warning."""
    # bin 10 is just past the last bin and is dropped silently
    hist = build_histogram(np.array([0.5, 1.0]), 0.0, 1.0, 0.1)
    assert hist.counts.sum() == 1
    assert hist.n_dropped == 1
    with pytest.warns(RuntimeWarning):
        hist = build_histogram(np.array([0.5, 5.0, -3.0]), 0.0, 1.0, 0.1)
    assert hist.counts.sum() == 1
    assert hist.n_dropped == 2


def test_empty_range() -> None:
    """Never sampled interactions produce empty histograms."""
    hist = build_histogram(np.zeros(0), -1.0, -1.0, 0.01)
    assert len(hist.centers) == 0
    assert len(hist.counts) == 0


def test_histogram_file(tmp_path: Path) -> None:
    """Histograms are read back as they were written."""
    hist = Histogram(
        centers=np.array([0.05, 0.15, 0.25]), counts=np.array([3, 0, 7]), n_dropped=0
    )
    path = tmp_path / "A_B.hist"
    write_histogram(hist, path)
    assert path.read_text().splitlines()[0] == "#center\tcounts"
    centers, counts = read_histogram(path)
    assert np.allclose(centers, hist.centers)
    assert list(counts) == [3, 0, 7]
    centers, counts = read_histogram(path, 2)
    assert list(counts) == [3, 0]
    with pytest.raises(ValueError):
        read_histogram(path, 4)
