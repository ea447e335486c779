r"""Tests Boltzmann inversion of histograms and the spline least squares fit."""
from pathlib import Path
from typing import Final
import numpy as np
import pytest
from cgrange import ClassType, CGModel, Topology, Trajectory, bonded_class, density_class
from cgrange import pair_nonbonded_class, initial_potentials
from cgrange.constants import VERYLARGE
from cgrange.histogram import Histogram, write_histogram
from cgrange.bi import (
    BIMatrix,
    LinearSplineBasis,
    boltzmann_potentials,
    count_pairs,
    invert_class,
)

FIT_TOL: Final = 1e-3


def test_flat_distribution_gives_flat_potential() -> None:
    """Uniform counts of a non-pair class invert to a constant potential."""
    counts = np.full(8, 4)
    centers = np.linspace(10.0, 170.0, 8)
    potentials = boltzmann_potentials(
        centers, counts, ClassType.ANGULAR, 20.0, kbt=2.0, normalization=0.5
    )
    assert np.allclose(potentials, -2.0 * np.log(4.0))


def test_zero_counts() -> None:
    """Empty bins get a fixed penalty potential."""
    potentials = boltzmann_potentials(
        np.array([0.5, 1.5]), np.array([0, 3]), ClassType.DIHEDRAL, 1.0
    )
    assert potentials[0] == 100.0
    assert potentials[1] == pytest.approx(-np.log(6.0))


def test_potentials_are_clipped() -> None:
    """Potentials never exceed VERYLARGE in magnitude."""
    low = boltzmann_potentials(
        np.array([1.0]), np.array([10]), ClassType.ANGULAR, 1.0, kbt=1e7
    )
    assert low[0] == -VERYLARGE
    high = boltzmann_potentials(
        np.array([1.0]),
        np.array([1]),
        ClassType.ANGULAR,
        1.0,
        kbt=1e7,
        normalization=1e-3,
    )
    assert high[0] == VERYLARGE


def test_pair_normalization() -> None:
    """Pair potentials are normalized by the spherical shell volume."""
    r, w = 1.0, 0.1
    shell = 4.0 * np.pi * (r**3 - (r - w) ** 3) / 3.0
    nonbonded = boltzmann_potentials(
        np.array([r]),
        np.array([5]),
        ClassType.PAIR_NONBONDED,
        w,
        volume=8.0,
        num_pairs=6.0,
    )
    assert nonbonded[0] == pytest.approx(-np.log(5 / shell * 2.0 * 8.0 / 6.0))
    bonded = boltzmann_potentials(np.array([r]), np.array([5]), ClassType.PAIR_BONDED, w)
    assert bonded[0] == pytest.approx(-np.log(5 / shell))


def test_count_pairs() -> None:
    """Like type pairs exclude self pairs."""
    type_counts = np.array([3, 4])
    assert count_pairs(type_counts, 0, 1) == 12
    assert count_pairs(type_counts, 1, 1) == 12
    assert count_pairs(type_counts, 0, 0) == 6


def test_linear_spline_basis() -> None:
    """Hat functions interpolate linearly between knots."""
    basis = LinearSplineBasis([0.0, -1.0], [1.0, -1.0], 0.3)
    assert np.allclose(basis.knots[0], [0.0, 0.25, 0.5, 0.75, 1.0])
    assert basis.n_coef(1) == 0
    assert list(basis.column_offsets()) == [0, 5, 5]
    first, values = basis.calculate_basis_fn_vals(0, 0.3)
    assert first == 1
    assert np.allclose(values, [0.8, 0.2])


def test_matrix_fits_linear_function() -> None:
    """The least squares solve recovers a function the basis can represent."""
    basis = LinearSplineBasis([0.0], [1.0], 0.25)
    matrix = BIMatrix()
    matrix.initialize(basis.n_coef(0))
    points = np.linspace(0.01, 0.99, 20)
    for r in points:
        first, values = basis.calculate_basis_fn_vals(0, r)
        matrix.accumulate_matching_forces(first, values)
        matrix.accumulate_target_force_element(2.0 * r + 1.0)
    coefs = matrix.solve()
    assert coefs is not None
    assert np.allclose(coefs, 2.0 * basis.knots[0] + 1.0, atol=FIT_TOL)
    assert np.allclose(basis.evaluate(0, coefs, points), 2.0 * points + 1.0, atol=FIT_TOL)


def test_invert_class(tmp_path: Path) -> None:
    """A flat angular histogram inverts to a flat spline; the column index survives."""
    topology = Topology(site_types=[0, 0, 0], type_names=["A"], bonds=[[0, 1], [1, 2]])
    spec = bonded_class(
        topology, ClassType.ANGULAR, fm_binwidth=0.1, output_parameter_distribution=2
    )
    spec.lower_cutoffs[0] = 0.0
    spec.upper_cutoffs[0] = 1.0
    spec.interaction_class_column_index = 7
    write_histogram(
        Histogram(
            centers=0.05 + 0.1 * np.arange(10), counts=np.full(10, 5), n_dropped=0
        ),
        tmp_path / "A_A_A.hist",
    )
    solutions = invert_class(spec, BIMatrix(), tmp_path, knot_spacing=0.5)
    assert spec.interaction_class_column_index == 7
    assert list(spec.interaction_column_indices) == [0, 3]
    assert len(solutions) == 1
    assert solutions[0].name == "A A A"
    assert np.allclose(solutions[0].coefficients, -np.log(10.0), atol=FIT_TOL)


def test_initial_potentials(tmp_path: Path) -> None:
    """End to end: ranges, histograms and potential tables are produced."""
    topology = Topology(site_types=[0, 0], type_names=["A"])
    model = CGModel(
        topology,
        [pair_nonbonded_class(topology, cutoff=2.0, output_parameter_distribution=1)],
    )
    rng = np.random.default_rng(42100)
    coords = np.zeros((200, 2, 3))
    coords[:, 1, 0] = 0.5 + rng.random(200)
    trajectory = Trajectory(coords, box=np.array([10.0, 10.0, 10.0]))
    results = initial_potentials(
        model, trajectory, tmp_path, knot_spacing=0.1, l2_regularization=1e-6
    )
    name = "pair nonbonded (subtype 0)"
    solutions = results["potentials"][name]
    lower, _ = results["ranges"][name]
    assert len(solutions) == 1
    assert solutions[0].knots[0] == pytest.approx(lower[0])
    assert np.all(np.isfinite(solutions[0].coefficients))
    assert (tmp_path / "A_A.bi").exists()
    assert not (tmp_path / "A_A.dist").exists()


def test_density_potentials(tmp_path: Path) -> None:
    """Density histograms are normalized by counts only, 2 * norm * n.

    The three frames place the two sites beyond the cutoff, at a Lucy weight
    of about 0.65, and almost on top of each other. With a bin width of 0.4 the
    first two frames fill the two histogram rows equally, so the fitted
    potential is flat.
    """
    cutoff = 5.0
    topology = Topology(site_types=[0, 0], type_names=["A"])
    spec = density_class(
        topology,
        group_names=["G"],
        groups=np.array([[True]]),
        cutoff=cutoff,
        subtype=3,
        fm_binwidth=0.4,
        output_parameter_distribution=1,
        sigma=[1.0],
    )
    coords = np.zeros((3, 2, 3))
    coords[:, 1, 0] = [6.0, 1.5, 0.1]
    results = initial_potentials(
        CGModel(topology, [spec]), Trajectory(coords), tmp_path
    )
    lower, upper = results["ranges"]["density (subtype 3)"]
    assert lower[0] == 0.0
    assert upper[0] == pytest.approx((cutoff + 0.3) * (cutoff - 0.1) ** 3 / cutoff**4)
    centers, counts = np.loadtxt(tmp_path / "G_G.hist", unpack=True)
    assert list(counts[:2]) == [2, 2]
    solutions = results["potentials"]["density (subtype 3)"]
    assert len(solutions) == 1
    # two samples per bin, normalization of one over three frames
    expected = -np.log(2 * 2.0 * (1.0 / 3.0))
    assert np.allclose(solutions[0].coefficients, expected, atol=FIT_TOL)
    assert (tmp_path / "G_G.bi").exists()
