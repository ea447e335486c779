"""Provides basis sets used to represent the potential of each interaction."""

from typing import Sequence, Tuple, List
from abc import ABC, abstractmethod
import numpy as np
from numpy import ndarray


class BasisSet(ABC):
    r"""Requirements for basis sets over the defined interactions of a class.

    Each defined interaction is represented by its own block of basis
    functions. A basis set reports how many coefficients each interaction uses
    and evaluates the basis functions that are nonzero at a point; only a
    contiguous run of functions is allowed to be nonzero at any point.
    """

    @abstractmethod
    def n_coef(self, index: int) -> int:
        """Return the number of coefficients of a defined interaction."""

    @abstractmethod
    def calculate_basis_fn_vals(self, index: int, r: float) -> Tuple[int, ndarray]:
        r"""Evaluate the basis functions of an interaction at r.

        Arguments:
        ---------
        index:
            Index of the defined interaction.
        r:
            Point to evaluate the basis at.

        Returns:
        -------
        Tuple, where the first element is the (interaction local) index of the
        first nonzero basis function and the second is an array of the values of
        consecutive basis functions starting at that index.
        """

    def column_offsets(self) -> ndarray:
        """Return cumulative coefficient offsets of the defined interactions.

        The returned array has one more entry than there are interactions; entry
        i is the first column of interaction i.
        """
        counts = [self.n_coef(i) for i in range(self.n_interactions)]
        return np.concatenate([[0], np.cumsum(counts, dtype=int)]).astype(int)

    @property
    @abstractmethod
    def n_interactions(self) -> int:
        """Number of defined interactions covered by the basis."""


class LinearSplineBasis(BasisSet):
    r"""Piecewise linear (hat function) basis on uniform knots.

    For each interaction, knots are placed uniformly on [lower, upper] with a
    spacing as close as possible to (but not more than) knot_spacing. The
    coefficient of each hat function is the value of the represented function
    at its knot. Interactions with an empty range (e.g., never sampled
    interactions with bounds (-1, -1)) have no coefficients.
    """

    def __init__(
        self,
        lower: Sequence[float],
        upper: Sequence[float],
        knot_spacing: float,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        lower:
            Lower bound of each interaction.
        upper:
            Upper bound of each interaction.
        knot_spacing:
            Positive maximum distance between knots.
        """
        lower = np.asarray(lower, dtype=float)
        upper = np.asarray(upper, dtype=float)
        if lower.shape != upper.shape or lower.ndim != 1:
            raise ValueError("lower and upper must be 1 dimensional and match.")
        if knot_spacing <= 0:
            raise ValueError("knot_spacing must be positive.")
        self.knots: List[ndarray] = []
        for low, high in zip(lower, upper):
            if high <= low:
                self.knots.append(np.zeros(0))
                continue
            n_intervals = max(int(np.ceil((high - low) / knot_spacing - 1e-9)), 1)
            self.knots.append(np.linspace(low, high, n_intervals + 1))

    @property
    def n_interactions(self) -> int:
        """Number of defined interactions covered by the basis."""
        return len(self.knots)

    def n_coef(self, index: int) -> int:
        """Return the number of knots of an interaction."""
        return len(self.knots[index])

    def calculate_basis_fn_vals(self, index: int, r: float) -> Tuple[int, ndarray]:
        """Evaluate the two hat functions that are nonzero at r.

        Points outside of the knots are attributed to the closest interval,
        i.e., the basis is extrapolated linearly.
        """
        knots = self.knots[index]
        if len(knots) == 0:
            raise ValueError("Interaction {} has no basis functions.".format(index))
        first = int(np.searchsorted(knots, r, side="right")) - 1
        first = min(max(first, 0), len(knots) - 2)
        fraction = (r - knots[first]) / (knots[first + 1] - knots[first])
        return first, np.array([1.0 - fraction, fraction])

    def evaluate(self, index: int, coefs: ndarray, r: ndarray) -> ndarray:
        """Evaluate the function with the given coefficients at points r.

        Outside of the knots, the value at the closest knot is returned.
        """
        r = np.asarray(r, dtype=float)
        return np.interp(r, self.knots[index], coefs)
