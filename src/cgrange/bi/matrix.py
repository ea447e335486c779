r"""Provides the least squares system used to fit Boltzmann inverted potentials.

Each histogram bin contributes one row: the basis function values at the bin
center and the Boltzmann inverted potential of the bin as target. The
coefficients minimizing the squared residual (optionally with an l2 penalty)
are found with a quadratic programming solver.
"""

from typing import List, Optional
from typing_extensions import TypedDict
import numpy as np
from qpsolvers import solve_qp  # type: ignore [import-untyped]
from ..constants import VERYLARGE

SolverOptions = TypedDict(
    "SolverOptions",
    {
        "solver": str,
        "eps_abs": float,
        "eps_rel": float,
        "max_iter": int,
        "polish": bool,
        "polish_refine_iter": int,
    },
)
DEFAULT_SOLVER_OPTIONS: SolverOptions = {
    "solver": "osqp",
    "eps_abs": 1e-7,
    "eps_rel": 1e-7,
    "max_iter": int(1e4),
    "polish": True,
    "polish_refine_iter": 10,
}


class BIMatrix:
    """Accumulates rows of a Boltzmann inversion fit and solves it.

    Attributes:
    ----------
    kbt:
        Thermal energy used to convert probabilities to potentials.
    normalization:
        Multiplier applied to histogram counts before inversion.
    l2_regularization:
        If positive, coefficient of an l2 penalty on the solution.
    solver_args:
        Options passed to qpsolvers.solve_qp.
    """

    def __init__(
        self,
        kbt: float = 1.0,
        normalization: float = 1.0,
        l2_regularization: float = 0.0,
        solver_args: SolverOptions = DEFAULT_SOLVER_OPTIONS,
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        kbt:
            Boltzmann constant times temperature.
        normalization:
            Multiplier applied to histogram counts, e.g. the inverse number of
            frames.
        l2_regularization:
            Non-negative l2 penalty coefficient.
        solver_args:
            Passed as options to solve_qp.
        """
        if kbt <= 0:
            raise ValueError("kbt must be positive.")
        if l2_regularization < 0:
            raise ValueError("l2_regularization must be non-negative.")
        self.kbt = kbt
        self.normalization = normalization
        self.l2_regularization = l2_regularization
        self.solver_args = solver_args
        self.n_coef = 0
        self._rows: List[np.ndarray] = []
        self._targets: List[float] = []

    def initialize(self, n_coef: int) -> None:
        """Discard accumulated rows and prepare a system with n_coef columns."""
        self.n_coef = n_coef
        self._rows = []
        self._targets = []

    @property
    def n_rows(self) -> int:
        """Number of rows accumulated so far."""
        return len(self._rows)

    def accumulate_matching_forces(
        self, first_column: int, basis_values: np.ndarray
    ) -> None:
        """Add a row whose nonzero entries start at first_column."""
        basis_values = np.asarray(basis_values, dtype=float)
        if first_column < 0 or first_column + len(basis_values) > self.n_coef:
            raise ValueError("Basis values do not fit in the matrix.")
        row = np.zeros(self.n_coef)
        row[first_column : first_column + len(basis_values)] = basis_values
        self._rows.append(row)

    def accumulate_target_force_element(self, value: float) -> None:
        """Set the target of the most recently added row."""
        if len(self._targets) >= len(self._rows):
            raise ValueError("A target was given without a matching row.")
        self._targets.append(float(value))

    def solve(self) -> Optional[np.ndarray]:
        """Solve the accumulated least squares problem.

        Returns:
        -------
        Array of n_coef coefficients, or None if there are no columns.
        """
        if self.n_coef == 0:
            return None
        if len(self._targets) != len(self._rows):
            raise ValueError("Every row needs a target before solving.")
        if self._rows:
            design = np.stack(self._rows)
            target = np.asarray(self._targets)
        else:
            design = np.zeros((0, self.n_coef))
            target = np.zeros(0)
        qp_mat = np.matmul(design.T, design)
        if self.l2_regularization > 0.0:
            qp_mat += self.l2_regularization * np.eye(self.n_coef)
        q_vec = -np.matmul(design.T, target)
        # box bounds keep the problem bounded when some columns see no data
        bound = np.full(self.n_coef, VERYLARGE)
        solution = solve_qp(P=qp_mat, q=q_vec, lb=-bound, ub=bound, **self.solver_args)
        if solution is None:
            raise ValueError("Boltzmann inversion least squares solve failed.")
        return np.asarray(solution)
