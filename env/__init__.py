"""
Environment Layer - Gymnasium compatible environment

Modules:
    scoundrel_env: main environment class
    observation: observation and action encoding
    reward: reward functions
    wrappers: environment wrappers
"""
from .scoundrel_env import (
    ScoundrelEnv,
    make_env,
)

from .observation import (
    Observation,
    ObservationBuilder,
    ActionEncoder,
    get_action_encoder,
)

from .reward import (
    RewardType,
    RewardConfig,
    RewardCalculator,
    create_reward_calculator,
)

from .wrappers import (
    FlattenObservationWrapper,
    LegalActionMaskWrapper,
    RecordGameStatistics,
    wrap_env,
)

__all__ = [
    # env
    "ScoundrelEnv",
    "make_env",
    # observation
    "Observation",
    "ObservationBuilder",
    "ActionEncoder",
    "get_action_encoder",
    # reward
    "RewardType",
    "RewardConfig",
    "RewardCalculator",
    "create_reward_calculator",
    # wrappers
    "FlattenObservationWrapper",
    "LegalActionMaskWrapper",
    "RecordGameStatistics",
    "wrap_env",
]
