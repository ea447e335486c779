"""Readers for the per-interaction parameter files hel.prm and den.prm.

Both files contain one whitespace separated line per defined interaction. The
first tokens name the interaction and the remaining tokens hold numeric
parameters.
"""
from pathlib import Path
from typing import List, Tuple, Union
import numpy as np
from ..errors import ConfigurationError

PathLike = Union[str, Path]


def _read_parameter_lines(
    path: PathLike, n_defined: int, min_tokens: int
) -> List[List[str]]:
    path = Path(path)
    try:
        with path.open() as handle:
            lines = handle.read().splitlines()
    except OSError as e:
        raise ConfigurationError("Problem opening {} file!".format(path.name)) from e
    if len(lines) < n_defined:
        raise ConfigurationError("More lines expected in {}!".format(path.name))
    rows = []
    for line in lines[:n_defined]:
        tokens = line.split()
        if len(tokens) < min_tokens:
            raise ConfigurationError(
                "Each line of {} needs to have at least {} elements!".format(
                    path.name, min_tokens
                )
            )
        rows.append(tokens)
    return rows


def _to_float(token: str, path: PathLike) -> float:
    try:
        return float(token)
    except ValueError as e:
        raise ConfigurationError(
            "Could not parse {!r} in {} as a number.".format(token, Path(path).name)
        ) from e


def read_helical_parameter_file(
    path: PathLike, n_defined: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Read r0 and sigma2 for each defined helical interaction.

    Lines are of the form `name r0 sigma2 ...`.

    Returns:
    -------
    Tuple of arrays (r0, sigma2), each of shape (n_defined,).
    """
    rows = _read_parameter_lines(path, n_defined, min_tokens=3)
    r0 = np.array([_to_float(row[1], path) for row in rows], dtype=float)
    sigma2 = np.array([_to_float(row[2], path) for row in rows], dtype=float)
    return r0, sigma2


def read_density_parameter_file(
    path: PathLike, n_defined: int
) -> Tuple[np.ndarray, np.ndarray]:
    """Read sigma and the optional switching distance of each density interaction.

    Lines are of the form `name name2 sigma [switch]`. Missing switching
    distances are set to zero.

    Returns:
    -------
    Tuple of arrays (sigma, switch), each of shape (n_defined,).
    """
    rows = _read_parameter_lines(path, n_defined, min_tokens=3)
    sigma = np.array([_to_float(row[2], path) for row in rows], dtype=float)
    switch = np.array(
        [_to_float(row[3], path) if len(row) > 3 else 0.0 for row in rows],
        dtype=float,
    )
    return sigma, switch
