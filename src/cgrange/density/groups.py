"""Builds the lookup of which density groups interact between two site types."""
from typing import Final
import numpy as np
from ..errors import ConfigurationError

# each entry of the map is a 64 bit mask over group pairs
MAX_GROUP_PAIRS: Final = 64


def build_group_pair_bitmask(groups: np.ndarray) -> np.ndarray:
    r"""Create the site type to density group pair bitmask.

    The density of the second group of a pair is evaluated at sites of the first
    group. For site types t1 and t2, entry `t1 * n_types + t2` of the returned
    array has bit `g1 * n_groups + g2` set if t1 is a member of group g1 and t2 is
    a member of group g2. Both orderings of each type pair are recorded, so the
    map can screen density contributions in either direction with a single
    lookup.

    Arguments:
    ---------
    groups (np.ndarray):
        Boolean array of shape (n_groups,n_types) giving group membership.

    Returns:
    -------
    np.ndarray of dtype uint64 and shape (n_types*n_types,).

    Raises:
    ------
    ConfigurationError if there are more group pairs than bits in a mask.
    """
    groups = np.asarray(groups, dtype=bool)
    n_groups, n_types = groups.shape
    if n_groups * n_groups > MAX_GROUP_PAIRS:
        raise ConfigurationError(
            "At most {} density groups are supported.".format(int(MAX_GROUP_PAIRS**0.5))
        )
    bitmask = np.zeros(n_types * n_types, dtype=np.uint64)
    for type1 in range(n_types):
        for dg1 in np.nonzero(groups[:, type1])[0]:
            for type2 in range(type1, n_types):
                for dg2 in np.nonzero(groups[:, type2])[0]:
                    bitmask[type1 * n_types + type2] |= np.uint64(1) << np.uint64(
                        dg1 * n_groups + dg2
                    )
                    bitmask[type2 * n_types + type1] |= np.uint64(1) << np.uint64(
                        dg2 * n_groups + dg1
                    )
    return bitmask


def group_pair_active(bitmask: np.ndarray, bit: int) -> np.ndarray:
    """Return a boolean array marking entries of bitmask that have a bit set."""
    return ((bitmask >> np.uint64(bit)) & np.uint64(1)).astype(bool)
