"""Provides density weight functions and per-frame density evaluation."""
# __init__ doesn't use the imported objects
# ruff: noqa: F401
from .kernels import DensityKernel, KERNEL_NAMES
from .groups import build_group_pair_bitmask, group_pair_active
from .engine import DensityEngine
