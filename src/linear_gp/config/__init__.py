"""
Configuration models and loaders for linear GP runs.
"""

from .model import HyperParameters, ProgramParams, BRANCH_POLICIES, CROSSOVER_KINDS
from .layering import load_config_file, layer_dataclass_config, load_hyper_parameters

__all__ = [
    "HyperParameters",
    "ProgramParams",
    "BRANCH_POLICIES",
    "CROSSOVER_KINDS",
    "load_config_file",
    "layer_dataclass_config",
    "load_hyper_parameters",
]
