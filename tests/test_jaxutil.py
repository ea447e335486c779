r"""Tests the jax pair distance backend against the numpy routines.

Tests in this module require JAX to be installed. They are marked via pytest
decorators.
"""
from pathlib import Path
from typing import Final
import numpy as np
import pytest
from cgrange import CGModel, Topology, Trajectory, find_ranges, pair_nonbonded_class
from cgrange.geometry import pair_distance

JAXNP_TOL: Final = 1e-5

# this seeds some portions of the randomness of these tests, but not be
# complete.
rseed: Final = 42100


@pytest.mark.jax
def test_pair_distances(seed: int = rseed) -> None:
    """Jax and numpy pair distances agree with and without a box."""
    from cgrange.jaxutil import pair_distances

    rng = np.random.default_rng(seed=seed)
    x = 10 * rng.random(size=(8, 3))
    first, second = np.triu_indices(8, k=1)
    ids = np.stack([first, second], axis=1)
    half_box = np.array([3.0, 4.0, 5.0])
    for box in (None, half_box):
        jvals = np.asarray(pair_distances(x, first, second, box))
        assert np.allclose(jvals, pair_distance(ids, x, box), atol=JAXNP_TOL)


@pytest.mark.jax
def test_jax_range_finding(tmp_path: Path, seed: int = rseed) -> None:
    """Range files do not depend on the pair distance backend."""
    rng = np.random.default_rng(seed=seed)
    topology = Topology(site_types=[0, 1, 0, 1, 1], type_names=["A", "B"])
    trajectory = Trajectory(
        4 * rng.random(size=(10, 5, 3)), box=np.array([4.0, 4.0, 4.0])
    )
    ranges = []
    for use_jax in (False, True):
        model = CGModel(topology, [pair_nonbonded_class(topology, cutoff=1.5)])
        results = find_ranges(
            model, trajectory, tmp_path / str(use_jax), use_jax=use_jax
        )
        ranges.append(results["ranges"]["pair nonbonded (subtype 0)"])
    assert np.allclose(ranges[0][0], ranges[1][0], atol=JAXNP_TOL)
    assert np.allclose(ranges[0][1], ranges[1][1], atol=JAXNP_TOL)
