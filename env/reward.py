"""
Reward functions

Supported reward designs:
- terminal win/lose reward (sparse)
- normalized final score (score)
- health change plus terminal reward (shaped)
"""
from dataclasses import dataclass
from typing import Optional
from enum import Enum

from core.cards import monster_total, build_deck
from core.rules import MAX_HEALTH
from core.state import GameSession, Status


# Score range: -(all monsters) .. MAX_HEALTH
WORST_SCORE = -monster_total(build_deck())


class RewardType(Enum):
    """Reward type"""
    SPARSE = "sparse"    # +1 / -1 at the end
    SCORE = "score"      # final score scaled to [-1, 1]
    SHAPED = "shaped"    # per-step health change + terminal reward


@dataclass
class RewardConfig:
    """Reward configuration"""
    reward_type: RewardType = RewardType.SCORE
    win_reward: float = 1.0
    lose_reward: float = -1.0
    health_coef: float = 0.01     # shaped: reward per health point gained
    avoid_penalty: float = 0.0    # shaped: cost of avoiding a room

    @classmethod
    def from_dict(cls, d: dict) -> 'RewardConfig':
        valid_keys = cls.__dataclass_fields__.keys()
        filtered = {k: v for k, v in d.items() if k in valid_keys}
        if "reward_type" in filtered:
            filtered["reward_type"] = RewardType(filtered["reward_type"])
        return cls(**filtered)


class RewardCalculator:
    """
    Reward calculator

    Computes the configured reward from the session before and after a step
    """

    def __init__(self, config: Optional[RewardConfig] = None):
        self.config = config or RewardConfig()

    def compute(
        self,
        session: GameSession,
        prev_health: Optional[int] = None,
        avoided: bool = False,
    ) -> float:
        """
        Compute the reward

        Args:
            session: session after the step
            prev_health: health before the step (shaped reward)
            avoided: the step was an avoid (shaped reward)

        Returns:
            Reward value
        """
        if self.config.reward_type == RewardType.SPARSE:
            return self._sparse_reward(session)
        elif self.config.reward_type == RewardType.SCORE:
            return self._score_reward(session)
        elif self.config.reward_type == RewardType.SHAPED:
            return self._shaped_reward(session, prev_health, avoided)
        else:
            return 0.0

    def _sparse_reward(self, session: GameSession) -> float:
        if session.status == Status.WON:
            return self.config.win_reward
        if session.status == Status.LOST:
            return self.config.lose_reward
        return 0.0

    def _score_reward(self, session: GameSession) -> float:
        """
        Final score scaled into [-1, 1]

        A win maps health into (0, 1]; a loss maps the unfaced monster total
        into [-1, 0].
        """
        if session.status == Status.PLAYING:
            return 0.0
        score = session.compute_score()
        if score >= 0:
            return score / MAX_HEALTH
        return -score / WORST_SCORE

    def _shaped_reward(
        self,
        session: GameSession,
        prev_health: Optional[int],
        avoided: bool,
    ) -> float:
        reward = 0.0

        if session.status != Status.PLAYING:
            reward += self._sparse_reward(session)

        if prev_health is not None:
            reward += (session.health - prev_health) * self.config.health_coef

        if avoided:
            reward -= self.config.avoid_penalty

        return reward


def create_reward_calculator(
    reward_type: str = "score",
    **kwargs
) -> RewardCalculator:
    """
    Factory: create a reward calculator

    Args:
        reward_type: "sparse", "score" or "shaped"
        **kwargs: other RewardConfig fields

    Returns:
        RewardCalculator
    """
    config = RewardConfig(
        reward_type=RewardType(reward_type),
        **kwargs
    )
    return RewardCalculator(config)
