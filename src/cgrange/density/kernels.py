"""Weight functions used to define local densities.

A local density at a site is the sum of a weight function of the distance to
its neighbors. Four shifted weight functions are supported, selected by the
density class subtype:

    1: shifted-force Gaussian
    2: shifted-force switching (tanh)
    3: Lucy-style polynomial
    4: relative-entropy style polynomial

Subtype 0 disables density sampling. All weights vanish at the cutoff.
"""
import logging
from typing import Final, Optional
import numpy as np
from ..constants import VERYSMALL
from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

KERNEL_NAMES: Final = {
    0: "no",
    1: "shifted-force Gaussian",
    2: "shifted-force switching (tanh)",
    3: "Lucy-style",
    4: "Relative-Entropy style",
}


class DensityKernel:
    """Precomputed constants of the weight function of each density interaction.

    Attributes:
    ----------
    subtype:
        Kernel selector; see module description.
    cutoff:
        Cutoff radius of the density class.
    sigma, switch:
        Per interaction kernel width and switching distance.
    denominator, u_cutoff, f_cutoff:
        Per interaction constants shared by all kernels.
    c0, c2, c4, c6:
        Per interaction polynomial coefficients of the relative-entropy kernel
        (zero for other kernels).
    """

    def __init__(
        self,
        subtype: int,
        cutoff: float,
        sigma: np.ndarray,
        switch: Optional[np.ndarray] = None,
    ) -> None:
        """Initialize and compute kernel constants.

        Arguments:
        ---------
        subtype:
            Kernel selector (0-4).
        cutoff:
            Cutoff radius.
        sigma:
            Kernel width of each defined interaction.
        switch:
            Switching distance of each defined interaction; zero if None.

        Raises:
        ------
        ConfigurationError if subtype is unknown or if a Gaussian or switching
        kernel has a width below VERYSMALL.
        """
        if subtype not in KERNEL_NAMES:
            raise ConfigurationError(
                "Set-up called for density interactions with invalid class "
                "subtype {}.".format(subtype)
            )
        self.subtype = subtype
        self.cutoff = float(cutoff)
        self.sigma = np.asarray(sigma, dtype=float)
        n_defined = len(self.sigma)
        if switch is None:
            switch = np.zeros(n_defined)
        self.switch = np.asarray(switch, dtype=float)
        if len(self.switch) != n_defined:
            raise ValueError("sigma and switch must be of the same length.")

        self.denominator = np.zeros(n_defined)
        self.u_cutoff = np.zeros(n_defined)
        self.f_cutoff = np.zeros(n_defined)
        self.c0 = np.zeros(n_defined)
        self.c2 = np.zeros(n_defined)
        self.c4 = np.zeros(n_defined)
        self.c6 = np.zeros(n_defined)

        if subtype in (1, 2) and np.any(self.sigma < VERYSMALL):
            raise ConfigurationError("Density sigma parameter is too small!")

        rc = self.cutoff
        if subtype == 1:
            self.denominator[:] = 2.0 * self.sigma**2
            self.u_cutoff[:] = -np.exp(-(rc**2) / self.denominator)
            self.f_cutoff[:] = -2.0 * rc * self.u_cutoff / self.denominator
        elif subtype == 2:
            self.denominator[:] = self.sigma / 0.5
            argument = (rc - self.switch) / self.sigma
            self.u_cutoff[:] = 0.5 * np.tanh(argument)
            self.f_cutoff[:] = 0.5 / (self.sigma * np.cosh(argument) ** 2)
        elif subtype == 3:
            self.denominator[:] = rc**4
        elif subtype == 4:
            cutsq = rc**2
            x = self.sigma**2 / cutsq
            self.denominator[:] = (1.0 - x) ** 3
            self.c0[:] = (1.0 - 3.0 * x) / self.denominator
            self.c2[:] = 6.0 * x / (cutsq * self.denominator)
            self.c4[:] = 3.0 * (1.0 + x) / (cutsq**2 * self.denominator)
            self.c6[:] = 2.0 / (cutsq**3 * self.denominator)

        logger.info(
            "Will calculate density using %s weight functions.", KERNEL_NAMES[subtype]
        )
        for i in range(n_defined):
            logger.debug(
                "%d: density_sigma %f, density_switch %f, cutoff %f, u_cutoff %f, "
                "f_cutoff %f, denom %f",
                i,
                self.sigma[i],
                self.switch[i],
                rc,
                self.u_cutoff[i],
                self.f_cutoff[i],
                self.denominator[i],
            )

    @property
    def n_defined(self) -> int:
        """Number of density interactions the constants cover."""
        return len(self.sigma)

    def weights(self, index: int, r: np.ndarray) -> np.ndarray:
        """Evaluate the weight function of a density interaction.

        Arguments:
        ---------
        index:
            Index of the defined density interaction.
        r:
            Array of distances. Distances at or beyond the cutoff get weight 0.

        Returns:
        -------
        Array of weights with the shape of r.
        """
        r = np.asarray(r, dtype=float)
        rc = self.cutoff
        if self.subtype == 0:
            return np.zeros_like(r)
        if self.subtype == 1:
            w = (
                np.exp(-(r**2) / self.denominator[index])
                + self.u_cutoff[index]
                + self.f_cutoff[index] * (r - rc)
            )
        elif self.subtype == 2:
            w = (
                self.u_cutoff[index]
                - 0.5 * np.tanh((r - self.switch[index]) / self.sigma[index])
                + self.f_cutoff[index] * (r - rc)
            )
        elif self.subtype == 3:
            w = (rc + 3.0 * r) * (rc - r) ** 3 / self.denominator[index]
        else:
            rsq = r**2
            w = (
                self.c0[index]
                + self.c2[index] * rsq
                - self.c4[index] * rsq**2
                + self.c6[index] * rsq**3
            )
            w = np.where(r <= self.sigma[index], 1.0, w)
        return np.where(r < rc, w, 0.0)
