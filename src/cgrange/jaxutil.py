"""Provides basic jax tools used in other submodules.

This module should not have dependencies on other package submodules.
"""
from functools import partial
from typing import Union
import jax
import jax.numpy as jnp


@partial(jax.jit, static_argnames=["periodic"])
def _pair_distances(
    xyz: jax.Array,
    first: jax.Array,
    second: jax.Array,
    half_box: jax.Array,
    periodic: bool,
) -> jax.Array:
    displacements = xyz[second] - xyz[first]
    if periodic:
        box = 2.0 * half_box
        displacements = displacements - box * jnp.round(displacements / box)
    return jnp.linalg.norm(displacements, axis=-1)


def pair_distances(
    xyz: jax.Array,
    first: jax.Array,
    second: jax.Array,
    half_box: Union[jax.Array, None] = None,
) -> jax.Array:
    """Calculate minimum image distances between pairs of sites in one frame.

    NOTE: This function is similar to cgrange.geometry.pair_distance, but
    applies to JAX arrays and is compiled on first use.

    Arguments:
    ---------
    xyz (jax.Array):
        Positions of a single frame; shape (n_sites,n_dim).
    first (jax.Array):
        Integer array of shape (n_pairs,) giving the first site of each pair.
    second (jax.Array):
        Integer array of shape (n_pairs,) giving the second site of each pair.
    half_box (jax.Array or None):
        Half box lengths of shape (n_dim,). If None, no wrapping is performed.

    Returns:
    -------
    jax.Array of shape (n_pairs,) containing the distances.
    """
    if half_box is None:
        return _pair_distances(
            xyz, first, second, jnp.ones(xyz.shape[-1]), periodic=False
        )
    return _pair_distances(xyz, first, second, jnp.asarray(half_box), periodic=True)
