r"""Tests selection of coordinate evaluators from class types and subtypes."""
import pytest
from cgrange import ConfigurationError, ClassType
from cgrange.interactions import InteractionKind
from cgrange.rangefind import select_evaluator, distribution_eligible
from cgrange.rangefind.dispatch import (
    calc_nothing,
    calc_pair_distance_sampling,
    calc_jax_pair_distance_sampling,
    calc_angle_sampling,
    calc_dihedral_sampling,
    calc_radius_of_gyration_sampling,
    calc_helical_sampling,
)


@pytest.mark.parametrize(
    "class_type,subtype,expected",
    [
        (ClassType.ONE_BODY, 3, calc_nothing),
        (ClassType.PAIR_NONBONDED, 0, calc_pair_distance_sampling),
        (ClassType.PAIR_BONDED, 7, calc_pair_distance_sampling),
        (ClassType.ANGULAR, 0, calc_angle_sampling),
        (ClassType.ANGULAR, 1, calc_pair_distance_sampling),
        (ClassType.DIHEDRAL, 0, calc_dihedral_sampling),
        (ClassType.DIHEDRAL, 1, calc_pair_distance_sampling),
        (ClassType.R13, 0, calc_nothing),
        (ClassType.R14, 1, calc_pair_distance_sampling),
        (ClassType.R15, 1, calc_pair_distance_sampling),
        (ClassType.RADIUS_OF_GYRATION, 1, calc_radius_of_gyration_sampling),
        (ClassType.HELICAL, 0, calc_nothing),
        (ClassType.HELICAL, 1, calc_helical_sampling),
        (ClassType.DENSITY, 4, calc_nothing),
        (ClassType.THREE_BODY_NONBONDED, 2, calc_nothing),
    ],
)
def test_select_evaluator(class_type: ClassType, subtype: int, expected) -> None:
    """Evaluators follow the dispatch table."""
    assert select_evaluator(InteractionKind(class_type, subtype)) is expected


@pytest.mark.parametrize(
    "class_type,subtype",
    [
        (ClassType.ANGULAR, 2),
        (ClassType.DIHEDRAL, -1),
        (ClassType.R13, 2),
        (ClassType.RADIUS_OF_GYRATION, 2),
        (ClassType.HELICAL, 5),
        (ClassType.DENSITY, 5),
    ],
)
def test_unrecognized_subtype(class_type: ClassType, subtype: int) -> None:
    """Subtypes outside of the table are configuration errors."""
    with pytest.raises(ConfigurationError):
        select_evaluator(InteractionKind(class_type, subtype))


def test_jax_replaces_pair_distances() -> None:
    """use_jax only swaps the pair distance evaluator."""
    kind = InteractionKind(ClassType.PAIR_BONDED, 0)
    assert select_evaluator(kind, use_jax=True) is calc_jax_pair_distance_sampling
    kind = InteractionKind(ClassType.ANGULAR, 0)
    assert select_evaluator(kind, use_jax=True) is calc_angle_sampling


def test_distribution_eligible() -> None:
    """Raw samples are only written for classes that sample a coordinate."""
    assert distribution_eligible(InteractionKind(ClassType.PAIR_NONBONDED, 0))
    assert distribution_eligible(InteractionKind(ClassType.DIHEDRAL, 1))
    assert distribution_eligible(InteractionKind(ClassType.R14, 1))
    assert not distribution_eligible(InteractionKind(ClassType.R14, 0))
    assert distribution_eligible(InteractionKind(ClassType.DENSITY, 2))
    assert not distribution_eligible(InteractionKind(ClassType.DENSITY, 0))
    assert distribution_eligible(InteractionKind(ClassType.HELICAL, 1))
    assert not distribution_eligible(InteractionKind(ClassType.ONE_BODY, 1))
    assert not distribution_eligible(
        InteractionKind(ClassType.THREE_BODY_NONBONDED, 0)
    )


def test_table_covers_every_class() -> None:
    """Every ClassType has an entry."""
    for class_type in ClassType:
        assert callable(select_evaluator(InteractionKind(class_type, 0)))
