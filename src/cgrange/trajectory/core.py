"""Provides tools and definitions for Trajectory objects."""

from typing import Iterator, NamedTuple, Optional, Any
import numpy as np
from numpy import ndarray


class Frame(NamedTuple):
    """Positions of a single snapshot and the half box lengths used for wrapping.

    half_box is None for non-periodic systems.
    """

    coords: ndarray
    half_box: Optional[ndarray]


class Trajectory:
    r"""Collection of coordinates and periodic box lengths from a trajectory.

    A molecular dynamics simulation saves coordinates at various snapshots in
    time. This class encapsulates coordinates and orthorhombic box lengths for
    a sequence of snapshots. Minimal functionality over the arrays is
    implemented; reading trajectory files is left to other libraries (see
    from_mdtraj).

    Attributes/Methods:
    ------------------
    coords:
        array of coordinates. Should have shape `(n_frames, n_sites, n_dim)`,
        where `n_frames` is the number of timesteps/snapshots in the data,
        `n_sites` is the number of particles in the system, and `n_dim` is the
        physical dimension the particles reside in (almost always `3`).
    box:
        Array of box lengths of shape `(n_frames, n_dim)`, or None if the
        system is not periodic.
    n_sites:
        Property giving the number of sites in the trajectory.
    n_dim:
        Property giving the dimension the trajectory sites reside in.
    __len__:
        Number of snapshots or frames in the trajectory.
    __getitem__:
        Supports slicing, but not integer indexing.
    __iter__:
        Iterates over Frame tuples.
    copy:
        Allows for copying the underlying arrays.

    """

    def __init__(self, coords: ndarray, box: Optional[ndarray] = None) -> None:
        """Initialize.

        Arguments:
        ---------
        coords:
            positions for multiple timesteps. Of shape (n_frames,n_sites,n_dims).
        box:
            Box lengths. May be of shape (n_dims,) (constant box), of shape
            (n_frames,n_dims), or of shape (n_frames,n_dims,n_dims), in which
            case the diagonal of each box matrix is used. None means the system
            is not periodic.
        """
        coords = np.asarray(coords, dtype=float)
        if len(coords.shape) != 3:
            raise ValueError("coords must have 3 dimensions.")
        self.coords = coords
        self.box = self._standardize_box(box)
        return

    def _standardize_box(self, box: Optional[ndarray]) -> Optional[ndarray]:
        if box is None:
            return None
        box = np.asarray(box, dtype=float)
        if box.ndim == 1:
            box = np.broadcast_to(box, (len(self), box.shape[0])).copy()
        elif box.ndim == 3:
            box = np.diagonal(box, axis1=1, axis2=2).copy()
        if box.shape != (len(self), self.n_dim):
            raise ValueError("box is not compatible with the shape of coords.")
        return box

    @property
    def n_sites(self) -> int:
        """Number of particles in the system."""
        return self.coords.shape[1]

    @property
    def n_dim(self) -> int:
        """Dimension of the individual particles in the system.

        This is 3 in typical molecular dynamics applications.
        """
        return self.coords.shape[2]

    def __len__(self) -> int:
        """Return the number of frames in the system."""
        return len(self.coords)

    def __iter__(self) -> Iterator[Frame]:
        """Iterate over frames, pairing positions with half box lengths."""
        for index in range(len(self)):
            if self.box is None:
                yield Frame(coords=self.coords[index], half_box=None)
            else:
                yield Frame(coords=self.coords[index], half_box=0.5 * self.box[index])

    def __getitem__(self, index: slice) -> "Trajectory":
        """Index trajectory.

        Only slices are allowed. Returns a Trajectory instance.
        """
        if not isinstance(index, slice):
            raise ValueError("Only slices are allowed for indexing.")
        new_coords = self.coords[index]
        new_box = None if self.box is None else self.box[index]
        return self.__class__(coords=new_coords, box=new_box)

    def volume(self) -> float:
        """Return the box volume of the last frame.

        The volume is the product of the box lengths. Non-periodic systems have a
        volume of 1.
        """
        if self.box is None:
            return 1.0
        return float(np.prod(self.box[-1]))

    @classmethod
    def from_mdtraj(cls, traj: Any) -> "Trajectory":
        """Create a Trajectory from an mdtraj.Trajectory.

        Coordinates and unit cell lengths are used in the units mdtraj stores
        them in (nm). Trajectories without unit cell information are treated as
        non-periodic.
        """
        return cls(coords=traj.xyz, box=traj.unitcell_lengths)
