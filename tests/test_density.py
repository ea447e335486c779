r"""Tests density kernels, group bitmasks, and per-frame density accumulation."""
from typing import Final
import numpy as np
import pytest
from cgrange import ConfigurationError, Topology, density_class
from cgrange.density import (
    DensityKernel,
    DensityEngine,
    build_group_pair_bitmask,
    group_pair_active,
)

TOL: Final = 1e-10


def test_gaussian_constants() -> None:
    """Gaussian kernel constants for sigma=1 and a cutoff of 2."""
    kernel = DensityKernel(subtype=1, cutoff=2.0, sigma=np.array([1.0]))
    assert kernel.denominator[0] == pytest.approx(2.0)
    assert kernel.u_cutoff[0] == pytest.approx(-np.exp(-2.0))
    assert kernel.f_cutoff[0] == pytest.approx(2.0 * np.exp(-2.0))


def test_switching_constants() -> None:
    """Switching kernel constants follow from sigma and the switching distance."""
    kernel = DensityKernel(
        subtype=2, cutoff=2.0, sigma=np.array([0.5]), switch=np.array([1.0])
    )
    assert kernel.denominator[0] == pytest.approx(1.0)
    assert kernel.u_cutoff[0] == pytest.approx(0.5 * np.tanh(2.0))
    assert kernel.f_cutoff[0] == pytest.approx(1.0 / np.cosh(2.0) ** 2)


def test_relative_entropy_constants() -> None:
    """Relative entropy polynomial coefficients."""
    kernel = DensityKernel(subtype=4, cutoff=2.0, sigma=np.array([1.0]))
    x = 0.25
    denom = (1 - x) ** 3
    assert kernel.denominator[0] == pytest.approx(denom)
    assert kernel.c0[0] == pytest.approx((1 - 3 * x) / denom)
    assert kernel.c2[0] == pytest.approx(6 * x / (4 * denom))
    assert kernel.c4[0] == pytest.approx(3 * (1 + x) / (16 * denom))
    assert kernel.c6[0] == pytest.approx(2 / (64 * denom))
    assert kernel.u_cutoff[0] == 0.0
    assert kernel.f_cutoff[0] == 0.0


@pytest.mark.parametrize("subtype", [1, 2, 3, 4])
def test_weights_vanish_at_cutoff(subtype: int) -> None:
    """All kernels go to zero at (and beyond) the cutoff."""
    kernel = DensityKernel(
        subtype=subtype, cutoff=2.0, sigma=np.array([0.8]), switch=np.array([1.0])
    )
    weights = kernel.weights(0, np.array([2.0 - 1e-9, 2.0, 3.0]))
    assert np.allclose(weights, 0.0, atol=1e-6)


def test_relative_entropy_plateau() -> None:
    """The relative entropy kernel is 1 inside sigma and continuous at sigma."""
    kernel = DensityKernel(subtype=4, cutoff=2.0, sigma=np.array([1.0]))
    weights = kernel.weights(0, np.array([0.1, 1.0, 1.0 + 1e-9]))
    assert np.allclose(weights, 1.0, atol=1e-6)


def test_small_sigma_is_fatal() -> None:
    """Gaussian and switching kernels need a positive width."""
    with pytest.raises(ConfigurationError):
        DensityKernel(subtype=1, cutoff=2.0, sigma=np.array([0.0]))
    with pytest.raises(ConfigurationError):
        DensityKernel(subtype=2, cutoff=2.0, sigma=np.array([1e-20]))


def test_unknown_subtype_is_fatal() -> None:
    """Only subtypes 0 through 4 exist."""
    with pytest.raises(ConfigurationError):
        DensityKernel(subtype=5, cutoff=2.0, sigma=np.array([1.0]))


def test_bitmask() -> None:
    """Bits mark (group, group) pairs for both orderings of a type pair."""
    # group 0 = {type 0}, group 1 = {type 0, type 1}
    groups = np.array([[True, False], [True, True]])
    bitmask = build_group_pair_bitmask(groups)
    assert bitmask.dtype == np.uint64
    assert len(bitmask) == 4
    # t0-t0: groups of t0 are {0,1} on both sides
    assert int(bitmask[0]) == 0b1111
    # t0-t1: g1 in {0,1}, g2 = 1 -> bits 0*2+1 and 1*2+1
    assert int(bitmask[1]) == (1 << 1) | (1 << 3)
    # t1-t0: g1 = 1, g2 in {0,1} -> bits 2 and 3
    assert int(bitmask[2]) == (1 << 2) | (1 << 3)
    assert int(bitmask[3]) == 1 << 3
    assert list(group_pair_active(bitmask, 1)) == [True, True, False, False]


def test_too_many_groups() -> None:
    """More than 8 groups do not fit in a 64 bit mask."""
    with pytest.raises(ConfigurationError):
        build_group_pair_bitmask(np.ones((9, 2), dtype=bool))


def test_density_accumulation() -> None:
    """Densities sum kernel weights over screened neighbors within the cutoff."""
    topology = Topology(site_types=[0, 0, 1], type_names=["A", "B"])
    groups = np.array([[True, False], [False, True]])
    spec = density_class(
        topology,
        group_names=["GA", "GB"],
        groups=groups,
        cutoff=2.0,
        subtype=3,
        sigma=[1.0] * 4,
    )
    engine = DensityEngine(spec, topology.site_types)
    x = np.array([[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.5, 0.0]])
    engine.accumulate(x, None)

    def lucy(r: float) -> float:
        return (2.0 + 3 * r) * (2.0 - r) ** 3 / 16.0

    values = engine.density_values
    # (GA, GA): density of type A around the A sites 0 and 1
    assert values[0, 0] == pytest.approx(lucy(1.0))
    assert values[0, 1] == pytest.approx(lucy(1.0))
    # (GA, GB): density of type B around the A sites; site 1 is 1.80 away
    assert values[1, 0] == pytest.approx(lucy(1.5))
    assert values[1, 1] == pytest.approx(lucy(np.sqrt(1.0 + 1.5**2)))
    # (GB, GA): density of type A around site 2
    assert values[2, 2] == pytest.approx(lucy(1.5) + lucy(np.sqrt(3.25)))
    # (GB, GB): no other B sites
    assert values[3, 2] == pytest.approx(0.0)
