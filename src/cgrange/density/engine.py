"""Provides DensityEngine, which evaluates local densities frame by frame."""
from typing import Union
import numpy as np
from ..errors import ConfigurationError
from ..interactions import InteractionClassSpec, ClassType, DensityParams
from ..util import distances
from .kernels import DensityKernel
from .groups import build_group_pair_bitmask, group_pair_active


class DensityEngine:
    """Kernel constants, group bitmask and density buffer of a density class.

    Attributes:
    ----------
    spec:
        The density InteractionClassSpec.
    kernel:
        DensityKernel holding the precomputed weight function constants.
    bitmask:
        Site type pair to density group pair bitmask (see
        build_group_pair_bitmask).
    density_values:
        Array of shape (n_defined,n_sites). After accumulate, entry [i,k] is the
        density of interaction i (group g2 of the pair) evaluated at site k.
    """

    def __init__(self, spec: InteractionClassSpec, site_types: np.ndarray) -> None:
        """Initialize.

        The payload of spec must have sigma (and, for subtype 2, switch)
        populated, e.g. from den.prm.

        Arguments:
        ---------
        spec:
            Density InteractionClassSpec.
        site_types:
            Type of every site in the system.
        """
        if spec.class_type != ClassType.DENSITY or not isinstance(
            spec.payload, DensityParams
        ):
            raise ValueError("DensityEngine requires a density class.")
        params = spec.payload
        if params.sigma is None:
            raise ConfigurationError("Density kernel widths have not been read.")
        if len(params.sigma) != spec.n_defined:
            raise ConfigurationError(
                "Expected {} density sigma values but found {}.".format(
                    spec.n_defined, len(params.sigma)
                )
            )
        self.spec = spec
        self.site_types = np.asarray(site_types, dtype=int)
        self.kernel = DensityKernel(
            subtype=spec.class_subtype,
            cutoff=spec.cutoff,
            sigma=params.sigma,
            switch=params.switch,
        )
        self.bitmask = build_group_pair_bitmask(params.groups)
        self.density_values = np.zeros((spec.n_defined, len(self.site_types)))

    def accumulate(self, x: np.ndarray, half_box: Union[None, np.ndarray]) -> None:
        """Compute the density values for a single frame.

        Arguments:
        ---------
        x:
            Positions of shape (n_sites,n_dim).
        half_box:
            Half box lengths of shape (n_dim,) or None.
        """
        n_types = self.spec.payload.n_types  # type: ignore [union-attr]
        dists = distances(
            x[None, ...], half_box=None if half_box is None else half_box[None, :]
        )[0]
        within = dists < self.spec.cutoff
        np.fill_diagonal(within, False)
        type_pair_masks = self.bitmask[
            self.site_types[:, None] * n_types + self.site_types[None, :]
        ]
        self.density_values[:] = 0.0
        for index in range(self.spec.n_defined):
            screen = group_pair_active(type_pair_masks, index) & within
            weights = np.zeros_like(dists)
            weights[screen] = self.kernel.weights(index, dists[screen])
            self.density_values[index] = weights.sum(axis=1)
