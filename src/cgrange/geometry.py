"""Computes scalar structural coordinates from the positions of a single frame.

Every function acts on the positions of one frame, of shape (n_sites,n_dim),
and wraps displacements with the minimum image convention when half box lengths
are given. Functions taking an `ids` argument are vectorized over interaction
instances: `ids` is an integer array of shape (n_instances,n_body) and the
result has shape (n_instances,). Angles are reported in degrees.
"""
from typing import Union
import numpy as np
from .constants import DEGREES_PER_RADIAN
from .errors import ConfigurationError
from .util import minimum_image


def _displacement(
    x: np.ndarray,
    origin: np.ndarray,
    target: np.ndarray,
    half_box: Union[None, np.ndarray],
) -> np.ndarray:
    return minimum_image(x[target] - x[origin], half_box)


def pair_distance(
    ids: np.ndarray, x: np.ndarray, half_box: Union[None, np.ndarray] = None
) -> np.ndarray:
    """Distance between the first and last site of each instance.

    For 2-site instances this is the pair distance. For angle and dihedral
    instances it is the end-to-end distance used by distance based angular and
    dihedral interactions.
    """
    return np.linalg.norm(_displacement(x, ids[:, 0], ids[:, -1], half_box), axis=-1)


def angle(
    ids: np.ndarray, x: np.ndarray, half_box: Union[None, np.ndarray] = None
) -> np.ndarray:
    """Angle in degrees at the middle site of each 3-site instance."""
    first = _displacement(x, ids[:, 1], ids[:, 0], half_box)
    second = _displacement(x, ids[:, 1], ids[:, 2], half_box)
    norms = np.linalg.norm(first, axis=-1) * np.linalg.norm(second, axis=-1)
    cosine = np.einsum("ij,ij->i", first, second) / norms
    return DEGREES_PER_RADIAN * np.arccos(np.clip(cosine, -1.0, 1.0))


def dihedral(
    ids: np.ndarray, x: np.ndarray, half_box: Union[None, np.ndarray] = None
) -> np.ndarray:
    """Dihedral angle in degrees about the central bond of each 4-site instance.

    The result lies in (-180, 180]; a planar cis arrangement is 0 and a planar
    trans arrangement is 180.

    Raises:
    ------
    ConfigurationError if the positions are not 3 dimensional.
    """
    if x.shape[-1] != 3:
        raise ConfigurationError(
            "Dihedral calculations are only implemented for 3-dimensional systems."
        )
    b1 = _displacement(x, ids[:, 0], ids[:, 1], half_box)
    b2 = _displacement(x, ids[:, 1], ids[:, 2], half_box)
    b3 = _displacement(x, ids[:, 2], ids[:, 3], half_box)
    n1 = np.cross(b1, b2)
    n2 = np.cross(b2, b3)
    y = np.linalg.norm(b2, axis=-1) * np.einsum("ij,ij->i", b1, n2)
    phi = DEGREES_PER_RADIAN * np.arctan2(y, np.einsum("ij,ij->i", n1, n2))
    return np.where(phi <= -180.0, phi + 360.0, phi)


def radius_of_gyration(
    sites: np.ndarray, x: np.ndarray, half_box: Union[None, np.ndarray] = None
) -> float:
    """Radius of gyration of a single molecule.

    Sites are unwrapped relative to the first site of the molecule before the
    center of geometry is computed.
    """
    relative = minimum_image(x[sites] - x[sites[0]], half_box)
    centered = relative - relative.mean(axis=0)
    return float(np.sqrt((centered**2).sum(axis=-1).mean()))


def helical_fraction(
    partners: np.ndarray,
    x: np.ndarray,
    r0: float,
    sigma2: float,
    half_box: Union[None, np.ndarray] = None,
) -> float:
    """Fraction of helical contacts in a single molecule.

    Each helical partner pair contributes exp(-(r - r0)^2 / (2 sigma2)), where r
    is the pair separation; the fraction is the mean contribution. A molecule
    without partner pairs has a fraction of 0.

    Arguments:
    ---------
    partners:
        Integer array of shape (n_partners,2) of site pairs.
    x:
        Positions of shape (n_sites,n_dim).
    r0:
        Helical reference separation.
    sigma2:
        Variance of the separation around r0.
    half_box:
        Half box lengths or None.
    """
    if len(partners) == 0:
        return 0.0
    r = pair_distance(partners, x, half_box)
    return float(np.exp(-((r - r0) ** 2) / (2.0 * sigma2)).mean())
