"""
Environment wrappers

Add-ons for learning code: flat observations, action masks, step limits and
per-game outcome statistics.
"""
from typing import Any, Dict, Optional, Tuple
import numpy as np

import gymnasium as gym
from gymnasium import ObservationWrapper, Wrapper
from gymnasium.wrappers import TimeLimit

from core.actions import Action

from .observation import OBSERVATION_KEYS


class FlattenObservationWrapper(ObservationWrapper):
    """
    Concatenate the dict observation into one float32 vector

    Blocks follow OBSERVATION_KEYS, the same order as
    Observation.to_flat_array().
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        self._keys = list(OBSERVATION_KEYS)
        flat_dim = sum(
            int(np.prod(env.observation_space[key].shape)) for key in self._keys
        )
        self.observation_space = gym.spaces.Box(
            low=0.0,
            high=1.0,
            shape=(flat_dim,),
            dtype=np.float32,
        )

    def observation(self, observation: Dict[str, np.ndarray]) -> np.ndarray:
        return np.concatenate(
            [np.asarray(observation[key], dtype=np.float32).ravel() for key in self._keys]
        )


class LegalActionMaskWrapper(Wrapper):
    """
    Expose the legal action mask

    The mask goes into info["action_mask"] after every reset and step, and is
    also available via action_masks() for maskable policies.
    """

    def reset(self, **kwargs) -> Tuple[Any, Dict]:
        obs, info = self.env.reset(**kwargs)
        info["action_mask"] = self.action_masks()
        return obs, info

    def step(self, action) -> Tuple[Any, float, bool, bool, Dict]:
        obs, reward, terminated, truncated, info = self.env.step(action)
        info["action_mask"] = self.action_masks()
        return obs, reward, terminated, truncated, info

    def action_masks(self) -> np.ndarray:
        base = self.env.unwrapped
        return base._action_encoder.build_legal_mask(base.get_legal_actions())


class RecordGameStatistics(Wrapper):
    """
    Record per-game statistics into info["episode"] when a game ends

    Keys: r (total reward), l (steps), avoids, invalid (rejected actions),
    status, score, turns, killer.
    """

    def __init__(self, env: gym.Env):
        super().__init__(env)
        self._reset_counters()

    def _reset_counters(self):
        self._episode_reward = 0.0
        self._episode_length = 0
        self._avoids = 0
        self._invalid = 0

    def reset(self, **kwargs) -> Tuple[Any, Dict]:
        obs, info = self.env.reset(**kwargs)
        self._reset_counters()
        return obs, info

    def step(self, action) -> Tuple[Any, float, bool, bool, Dict]:
        is_avoid = self._is_avoid(action)
        obs, reward, terminated, truncated, info = self.env.step(action)

        self._episode_reward += reward
        self._episode_length += 1
        if "error" in info:
            self._invalid += 1
        elif is_avoid:
            self._avoids += 1

        if terminated or truncated:
            info["episode"] = {
                "r": self._episode_reward,
                "l": self._episode_length,
                "avoids": self._avoids,
                "invalid": self._invalid,
                "status": info.get("status"),
                "score": info.get("score"),
                "turns": info.get("turn"),
                "killer": info.get("killer"),
            }

        return obs, reward, terminated, truncated, info

    def _is_avoid(self, action) -> bool:
        if isinstance(action, Action):
            return action.is_avoid
        return int(action) == 0


def wrap_env(
    env: gym.Env,
    flatten_obs: bool = False,
    action_mask: bool = True,
    record_stats: bool = True,
    time_limit: Optional[int] = None,
) -> gym.Env:
    """
    Apply the usual wrapper stack

    Args:
        env: base environment
        flatten_obs: flatten the observation
        action_mask: add the action mask to info
        record_stats: record game statistics
        time_limit: step limit (gymnasium TimeLimit)

    Returns:
        Wrapped environment
    """
    if time_limit is not None:
        env = TimeLimit(env, max_episode_steps=time_limit)

    if record_stats:
        env = RecordGameStatistics(env)

    if action_mask:
        env = LegalActionMaskWrapper(env)

    if flatten_obs:
        env = FlattenObservationWrapper(env)

    return env
