"""Demonstrates finding interaction ranges and initial potentials for Chignolin.

NOTE: You must have mdtraj installed to run this script.

This is an example script that shows how to load a carbon alpha trajectory,
describe its interactions, find the sampled range of each interaction, and
Boltzmann invert the sampled distributions. Range files, histograms and
potential tables are written to the output directory; no further analysis is
performed.
"""

from typing import Dict, Any
from pathlib import Path
import logging
import numpy as np
import mdtraj as md  # type: ignore [import-untyped]

from cgrange import (
    CGModel,
    ClassType,
    Topology,
    Trajectory,
    initial_potentials,
    one_body_class,
    pair_nonbonded_class,
    bonded_class,
    molecule_class,
)


def get_data() -> md.Trajectory:
    r"""Return a carbon alpha trajectory.

    Coordinates are read from dcd files and the topology from a pdb. Only the
    carbon alpha atoms are retained.
    """
    dcds = [str(name) for name in sorted(Path().glob("cln025_*.dcd"))]
    traj = md.load(dcds, top="data/cln025.pdb")
    return traj.atom_slice(traj.topology.select("name CA"))


def gen_topology(traj: md.Trajectory) -> Topology:
    """Create a Topology with one site type per residue name.

    Consecutive carbon alphas are bonded and the whole chain is a single
    molecule.

    Arguments:
    ---------
    traj (mdtraj.Trajectory):
        Carbon alpha trajectory.

    Returns:
    -------
    Topology instance.
    """
    residue_names = [atom.residue.name for atom in traj.topology.atoms]
    type_names = sorted(set(residue_names))
    site_types = [type_names.index(name) for name in residue_names]
    n_sites = len(site_types)
    bonds = [[i, i + 1] for i in range(n_sites - 1)]
    return Topology(
        site_types=site_types,
        type_names=type_names,
        bonds=bonds,
        molecules=[list(range(n_sites))],
        molecule_group_names=["CLN"],
    )


def main() -> Dict[str, Any]:
    """Find ranges and initial potentials."""
    logging.basicConfig(level=logging.INFO)
    # kbt for 350K in kcal/mol, known a priori
    kbt = 0.6955215
    traj = get_data()
    topology = gen_topology(traj)
    classes = [
        one_body_class(topology),
        # distances in nm
        pair_nonbonded_class(
            topology, cutoff=1.2, fm_binwidth=0.005, output_parameter_distribution=1
        ),
        bonded_class(
            topology,
            ClassType.PAIR_BONDED,
            fm_binwidth=0.001,
            output_parameter_distribution=1,
        ),
        # angles in degrees
        bonded_class(
            topology, ClassType.ANGULAR, fm_binwidth=0.5, output_parameter_distribution=1
        ),
        bonded_class(
            topology, ClassType.DIHEDRAL, fm_binwidth=1.0, output_parameter_distribution=1
        ),
        molecule_class(topology, ClassType.RADIUS_OF_GYRATION, subtype=1),
    ]
    model = CGModel(topology, classes)
    output_dir = Path("ranges")
    results = initial_potentials(
        model,
        Trajectory.from_mdtraj(traj),
        output_dir=output_dir,
        kbt=kbt,
        l2_regularization=1e-6,
    )
    # results["ranges"] holds (lower, upper) arrays of every class
    for name, (lower, upper) in results["ranges"].items():
        sampled = np.sum(upper > lower)
        logging.info("%s: %d sampled interactions", name, sampled)
    return results


if __name__ == "__main__":
    results = main()
    # we do nothing with the output
