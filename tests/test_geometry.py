r"""Tests the structural coordinate routines against hand computed values."""
from typing import Final
import numpy as np
import pytest
from cgrange.geometry import (
    pair_distance,
    angle,
    dihedral,
    radius_of_gyration,
    helical_fraction,
)
from cgrange.errors import ConfigurationError
from cgrange.util import minimum_image, distances

TOL: Final = 1e-10

# this seeds some portions of the randomness of these tests, but not be
# complete.
rseed: Final = 42100


def test_minimum_image() -> None:
    """Displacements are wrapped into [-half_box, half_box]."""
    half_box = np.array([5.0, 5.0, 5.0])
    disp = np.array([[9.0, -9.0, 4.0]])
    wrapped = minimum_image(disp, half_box)
    assert np.allclose(wrapped, [[-1.0, 1.0, 4.0]], atol=TOL)
    assert minimum_image(disp, None) is disp


def test_pair_distance_periodic() -> None:
    """Pair distances use the closest periodic image."""
    x = np.array([[0.5, 0.0, 0.0], [9.5, 0.0, 0.0]])
    ids = np.array([[0, 1]])
    assert np.allclose(pair_distance(ids, x), [9.0], atol=TOL)
    assert np.allclose(pair_distance(ids, x, np.array([5.0, 5.0, 5.0])), [1.0])


def test_pair_distance_matches_distance_matrix(seed: int = rseed) -> None:
    """Vectorized pair distances agree with the full distance matrix."""
    rng = np.random.default_rng(seed=seed)
    x = 10 * rng.random(size=(6, 3))
    half_box = np.array([4.0, 4.0, 4.0])
    first, second = np.triu_indices(6, k=1)
    ids = np.stack([first, second], axis=1)
    matrix = distances(x[None, ...], half_box=half_box)[0]
    assert np.allclose(pair_distance(ids, x, half_box), matrix[first, second])


def test_angle() -> None:
    """Angles are measured in degrees at the middle site."""
    x = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 2.0, 0.0], [-1.0, 0.0, 0.0]])
    ids = np.array([[0, 1, 2], [0, 1, 3], [0, 1, 0]])
    assert np.allclose(angle(ids, x), [90.0, 180.0, 0.0], atol=1e-6)


def test_dihedral() -> None:
    """Dihedrals are signed, in (-180, 180], with trans at 180."""
    base = np.array([[1.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 0.0, 1.0]])
    cis = np.vstack([base, [[1.0, 0.0, 1.0]]])
    trans = np.vstack([base, [[-1.0, 0.0, 1.0]]])
    plus = np.vstack([base, [[0.0, 1.0, 1.0]]])
    minus = np.vstack([base, [[0.0, -1.0, 1.0]]])
    ids = np.array([[0, 1, 2, 3]])
    assert np.allclose(dihedral(ids, cis), [0.0], atol=1e-6)
    assert np.allclose(dihedral(ids, trans), [180.0], atol=1e-6)
    assert np.allclose(np.abs(dihedral(ids, plus)), [90.0], atol=1e-6)
    assert np.allclose(dihedral(ids, plus), -dihedral(ids, minus), atol=1e-6)


def test_dihedral_requires_3d() -> None:
    """Dihedrals of 2 dimensional systems are rejected."""
    x = np.zeros((4, 2))
    with pytest.raises(ConfigurationError):
        dihedral(np.array([[0, 1, 2, 3]]), x)


def test_radius_of_gyration_unwraps() -> None:
    """A molecule split by the boundary has the same radius as an intact one."""
    intact = np.array([[4.0, 0.0, 0.0], [6.0, 0.0, 0.0]])
    split = np.array([[9.0, 0.0, 0.0], [1.0, 0.0, 0.0]])
    half_box = np.array([5.0, 5.0, 5.0])
    sites = np.array([0, 1])
    assert radius_of_gyration(sites, intact) == pytest.approx(1.0)
    assert radius_of_gyration(sites, split, half_box) == pytest.approx(1.0)


def test_helical_fraction() -> None:
    """Partners at r0 count fully and missing partners give zero."""
    x = np.array([[0.0, 0.0, 0.0], [0.5, 0.0, 0.0], [2.0, 0.0, 0.0]])
    partners = np.array([[0, 1], [0, 2]])
    value = helical_fraction(partners, x, r0=0.5, sigma2=0.5)
    assert value == pytest.approx(0.5 * (1.0 + np.exp(-(1.5**2) / 1.0)))
    assert helical_fraction(np.zeros((0, 2), dtype=int), x, 0.5, 0.5) == 0.0
