"""Reaction models.

Key components:
    - ReactionModel: interface with a single evaluate(a, b) operation
    - ActivatorSubstrateModel / ModelParameters: the default kinetics
    - GrayScottModel / GrayScottParameters: alternative kinetics
    - create_model: build a model from a ModelConfig
"""

from turinglab.configs import ModelConfig
from turinglab.models.activator_substrate import ActivatorSubstrateModel, ModelParameters
from turinglab.models.base import ReactionModel
from turinglab.models.gray_scott import GrayScottModel, GrayScottParameters

MODEL_NAMES = ("activator_substrate", "model1", "gray_scott")


def create_model(config: ModelConfig) -> ReactionModel:
    """Instantiate the reaction model named by config.name.

    Raises:
        ValueError: If the name is not a registered model.
    """
    if config.name not in MODEL_NAMES:
        raise ValueError(
            f"Unknown model '{config.name}'. Choose from: {', '.join(MODEL_NAMES)}"
        )
    params = config.to_parameters()
    if config.name == "gray_scott":
        return GrayScottModel(params)
    return ActivatorSubstrateModel(params)


__all__ = [
    "ActivatorSubstrateModel",
    "GrayScottModel",
    "GrayScottParameters",
    "MODEL_NAMES",
    "ModelParameters",
    "ReactionModel",
    "create_model",
]
