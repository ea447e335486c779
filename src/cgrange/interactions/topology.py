"""Provides a minimal description of coarse-grained molecular topology.

Topology objects know the type of every site, the bonds between sites, and how
sites are grouped into molecules. Bonded paths (angles, dihedrals and longer
paths used by R13/R14/R15 distances) are derived from the bond graph unless they
are given explicitly.
"""
from typing import Sequence, Optional, Dict, List, Tuple, Set, FrozenSet
import numpy as np


class Topology:
    """Site types, bonds, and molecules of a coarse-grained system.

    Attributes:
    ----------
    site_types:
        Integer array of shape (n_sites,) with the (zero-based) type of each
        site.
    type_names:
        Names of the site types.
    bonds:
        Integer array of shape (n_bonds,2).
    molecules:
        List of integer arrays, one per molecule, holding its sites.
    molecule_groups:
        Integer array with the group index of each molecule.
    molecule_group_names:
        Names of the molecule groups.
    """

    def __init__(
        self,
        site_types: Sequence[int],
        type_names: Sequence[str],
        bonds: Sequence[Sequence[int]] = (),
        angles: Optional[Sequence[Sequence[int]]] = None,
        dihedrals: Optional[Sequence[Sequence[int]]] = None,
        molecules: Sequence[Sequence[int]] = (),
        molecule_groups: Optional[Sequence[int]] = None,
        molecule_group_names: Sequence[str] = (),
    ) -> None:
        """Initialize.

        Arguments:
        ---------
        site_types:
            Zero-based type index of every site.
        type_names:
            Name of each type; must cover every index in site_types.
        bonds:
            Pairs of bonded sites.
        angles:
            Optional explicit triplets of sites (center in the middle). If None,
            they are derived from bonds.
        dihedrals:
            Optional explicit quadruplets of sites. If None, they are derived
            from bonds.
        molecules:
            Site lists, one per molecule.
        molecule_groups:
            Group index of each molecule. If None, all molecules are in group 0.
        molecule_group_names:
            Names of the molecule groups.
        """
        self.site_types = np.asarray(site_types, dtype=int)
        self.type_names = list(type_names)
        if self.site_types.ndim != 1:
            raise ValueError("site_types must be one dimensional.")
        if len(self.site_types) and (
            self.site_types.min() < 0 or self.site_types.max() >= len(self.type_names)
        ):
            raise ValueError("site_types contains an index without a type name.")
        self.bonds = np.asarray(bonds, dtype=int).reshape(-1, 2)
        self._explicit_paths: Dict[int, np.ndarray] = {}
        if angles is not None:
            self._explicit_paths[3] = np.asarray(angles, dtype=int).reshape(-1, 3)
        if dihedrals is not None:
            self._explicit_paths[4] = np.asarray(dihedrals, dtype=int).reshape(-1, 4)
        self.molecules = [np.asarray(m, dtype=int) for m in molecules]
        if molecule_groups is None:
            molecule_groups = [0] * len(self.molecules)
        self.molecule_groups = np.asarray(molecule_groups, dtype=int)
        if len(self.molecule_groups) != len(self.molecules):
            raise ValueError("molecule_groups must have one entry per molecule.")
        self.molecule_group_names = list(molecule_group_names)
        if len(self.molecules) and not self.molecule_group_names:
            self.molecule_group_names = [
                "mol{}".format(g) for g in range(self.molecule_groups.max() + 1)
            ]

    @property
    def n_sites(self) -> int:
        """Number of sites in the system."""
        return len(self.site_types)

    @property
    def n_types(self) -> int:
        """Number of site types."""
        return len(self.type_names)

    def type_counts(self) -> np.ndarray:
        """Return the number of sites of each type."""
        return np.bincount(self.site_types, minlength=self.n_types)

    def bonded_pairs(self) -> Set[FrozenSet[int]]:
        """Return the bonded site pairs as a set of frozensets."""
        return {frozenset(int(s) for s in b) for b in self.bonds}

    def _neighbors(self) -> Dict[int, List[int]]:
        neighbors: Dict[int, List[int]] = {site: [] for site in range(self.n_sites)}
        for first, second in self.bonds:
            neighbors[int(first)].append(int(second))
            neighbors[int(second)].append(int(first))
        return neighbors

    def bonded_paths(self, n_path_sites: int) -> np.ndarray:
        """Return the bonded paths containing a given number of sites.

        Paths are simple (no site is visited twice) and each is reported once,
        in the orientation whose site sequence compares lower than its reverse.

        Arguments:
        ---------
        n_path_sites:
            Number of sites in each path; 2 gives bonds, 3 angles, 4 dihedrals.

        Returns:
        -------
        Integer array of shape (n_paths,n_path_sites), sorted row-wise.
        """
        if n_path_sites < 2:
            raise ValueError("Bonded paths must contain at least 2 sites.")
        if n_path_sites in self._explicit_paths:
            return self._explicit_paths[n_path_sites]
        neighbors = self._neighbors()
        found: Set[Tuple[int, ...]] = set()

        def extend(path: Tuple[int, ...]) -> None:
            if len(path) == n_path_sites:
                found.add(min(path, path[::-1]))
                return
            for site in neighbors[path[-1]]:
                if site not in path:
                    extend(path + (site,))

        for start in range(self.n_sites):
            extend((start,))
        if not found:
            return np.zeros((0, n_path_sites), dtype=int)
        return np.array(sorted(found), dtype=int)
