"""Provides basic array tools used in other submodules.

This module should not have dependencies on other package submodules, and should
not pull in optional dependencies (e.g., jax).
"""
from typing import Union
import numpy as np


def minimum_image(
    displacements: np.ndarray, half_box: Union[None, np.ndarray]
) -> np.ndarray:
    """Wrap displacement vectors into the primary periodic image.

    Arguments:
    ---------
    displacements (np.ndarray):
        Array whose last axis is the spatial dimension.
    half_box (np.ndarray or None):
        Half of the box lengths along each dimension. Must broadcast against
        displacements. If None, the system is treated as non-periodic and
        displacements are returned unchanged.

    Returns:
    -------
    np.ndarray of the same shape as displacements, where every component lies
    within [-half_box, half_box].
    """
    if half_box is None:
        return displacements
    box = 2.0 * np.asarray(half_box)
    return displacements - box * np.round(displacements / box)


def distances(
    xyz: np.ndarray, half_box: Union[None, np.ndarray] = None
) -> np.ndarray:
    """Calculate the minimum image distances for each frame in a trajectory.

    Returns an array where each slice is the distance matrix of a single frame
    of an argument.

    Arguments:
    ---------
    xyz (np.ndarray):
        An array describing the cartesian coordinates of a system over time;
        assumed to be of shape (n_steps,n_sites,n_dim).
    half_box (np.ndarray or None):
        Half box lengths of shape (n_steps,n_dim) or (n_dim,). If None, no
        periodic wrapping is applied.

    Returns:
    -------
    3-dim numpy.ndarray of shape (n_steps,n_sites,n_sites) holding symmetric
    distance matrices.
    """
    displacement_matrix = xyz[:, None, :, :] - xyz[:, :, None, :]
    if half_box is not None:
        half_box = np.asarray(half_box)
        if half_box.ndim == 2:
            half_box = half_box[:, None, None, :]
        displacement_matrix = minimum_image(displacement_matrix, half_box)
    return np.linalg.norm(displacement_matrix, axis=-1)
