"""
Evaluation configuration
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class EvalConfig:
    """
    Evaluation configuration

    Attributes:
        agent: "random" or "greedy"
        n_games: number of games
        seed: seed of the first game; game i uses seed + i
        reward_type: environment reward type
        max_steps: step limit per game
        log_every: progress log interval (0 disables)
        output: JSON result path
    """
    agent: str = "greedy"
    n_games: int = 100
    seed: Optional[int] = 0
    reward_type: str = "score"
    max_steps: int = 200
    log_every: int = 0
    output: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> 'EvalConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        return cls(**filtered)
