"""
Scoundrel Gymnasium environment

Follows the standard Gymnasium API
"""
from typing import Dict, Any, Tuple, Optional, List, Union
import numpy as np

import gymnasium as gym
from gymnasium import spaces

from core.cards import DECK_SIZE, cards_to_str
from core.actions import Action, ROOM_SIZE
from core.state import GameSession, Status

from .observation import ObservationBuilder, SLOT_FEATURES, get_action_encoder
from .reward import RewardCalculator, RewardConfig, RewardType


class ScoundrelEnv(gym.Env):
    """
    Scoundrel Gymnasium environment

    One step is one room command (avoid or face). After every accepted
    command the next turn is started, so the observation always shows the
    room the agent has to deal with.

    API:
    - reset() -> observation, info
    - step(action) -> observation, reward, terminated, truncated, info
    """

    metadata = {
        "render_modes": ["human", "ansi"],
        "name": "Scoundrel-v1",
    }

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_type: str = "score",
        invalid_action_penalty: float = -1.0,
        seed: Optional[int] = None,
        reward_config: Optional[RewardConfig] = None,
    ):
        """
        Args:
            render_mode: "human", "ansi" or None
            reward_type: "sparse", "score" or "shaped"
            invalid_action_penalty: reward for an illegal action
            seed: default game seed
            reward_config: full reward configuration (overrides reward_type)
        """
        super().__init__()

        self.render_mode = render_mode
        self._seed = seed
        self.invalid_action_penalty = invalid_action_penalty

        self._obs_builder = ObservationBuilder()
        self._reward_calculator = RewardCalculator(
            reward_config or RewardConfig(reward_type=RewardType(reward_type))
        )
        self._action_encoder = get_action_encoder()

        self._session: Optional[GameSession] = None

        self._define_spaces()

    def _define_spaces(self):
        self.action_space = spaces.Discrete(self._action_encoder.num_actions)

        self.observation_space = spaces.Dict({
            "health": spaces.Box(0, 1, shape=(1,), dtype=np.float32),
            "weapon": spaces.Box(0, 1, shape=(4,), dtype=np.float32),
            "room": spaces.Box(0, 1, shape=(ROOM_SIZE, SLOT_FEATURES), dtype=np.float32),
            "room_cards": spaces.Box(0, 1, shape=(ROOM_SIZE, DECK_SIZE), dtype=np.float32),
            "deck": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "discard": spaces.Box(0, 1, shape=(DECK_SIZE,), dtype=np.float32),
            "flags": spaces.Box(0, 1, shape=(3,), dtype=np.float32),
            "progress": spaces.Box(0, 1, shape=(2,), dtype=np.float32),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Start a new game

        Args:
            seed: game seed (falls back to the constructor seed)
            options: may carry "session" to continue an existing GameSession

        Returns:
            (observation, info)
        """
        super().reset(seed=seed)

        game_seed = seed if seed is not None else self._seed
        if options and options.get("session") is not None:
            self._session = options["session"]
        else:
            self._session = GameSession.new(seed=game_seed)
        self._session.start_turn()

        obs = self._build_observation()
        info = self._build_info()

        if self.render_mode == "human":
            self.render()

        return obs, info

    def step(
        self,
        action: Union[int, Action],
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Apply one room command

        Args:
            action: action index or Action

        Returns:
            (observation, reward, terminated, truncated, info)
        """
        if self._session is None:
            raise RuntimeError("Environment not reset. Call reset() first.")

        concrete_action = self._decode_action(action)

        if concrete_action not in self._session.get_legal_actions():
            # illegal: penalize and keep the state
            obs = self._build_observation()
            info = self._build_info()
            info["error"] = "Invalid action"
            return obs, self.invalid_action_penalty, False, False, info

        prev_health = self._session.health
        result = self._session.apply_action(concrete_action)
        self._session.start_turn()

        obs = self._build_observation()
        reward = self._reward_calculator.compute(
            self._session,
            prev_health=prev_health,
            avoided=concrete_action.is_avoid,
        )
        terminated = self._session.is_finished
        truncated = False

        info = self._build_info()
        if not result.ok:
            info["error"] = result.reason.value

        if self.render_mode == "human":
            self.render()

        return obs, reward, terminated, truncated, info

    def _decode_action(self, action: Union[int, Action]) -> Action:
        if isinstance(action, Action):
            return action
        elif isinstance(action, (int, np.integer)):
            decoded = self._action_encoder.decode(int(action))
            if decoded is None:
                raise ValueError(
                    f"Invalid action index: {action}. "
                    f"Valid range: 0-{self._action_encoder.num_actions - 1}"
                )
            return decoded
        else:
            raise ValueError(f"Invalid action type: {type(action)}")

    def _build_observation(self) -> Dict[str, np.ndarray]:
        return self._obs_builder.build(self._session).to_dict()

    def _build_info(self) -> Dict[str, Any]:
        legal_actions = self._session.get_legal_actions()

        info = {
            "status": self._session.status.value,
            "turn": self._session.turn,
            "health": self._session.health,
            "deck_count": self._session.deck_count,
            "legal_actions": legal_actions,
            "legal_action_mask": self._action_encoder.build_legal_mask(legal_actions),
            "legal_action_indices": self._action_encoder.get_legal_action_indices(
                legal_actions
            ),
        }

        if self._session.is_finished:
            info["score"] = self._session.compute_score()
            info["won"] = self._session.status == Status.WON
            killer = self._session.killer_card
            info["killer"] = killer.label if killer else None

        return info

    def render(self) -> Optional[str]:
        if self.render_mode == "ansi" or self.render_mode == "human":
            return self._render_text()
        return None

    def _render_text(self) -> str:
        session = self._session
        lines = []
        lines.append("=" * 50)
        lines.append(
            f"Turn {session.turn} | Health {session.health}/{session.max_health}"
            f" | Deck {session.deck_count} | Discard {session.discard_count}"
        )

        if session.weapon is not None:
            last = session.weapon.last_defeated
            lines.append(
                f"Weapon: {session.weapon.card.label}"
                f" (last defeated: {last if last is not None else '-'})"
            )
        else:
            lines.append("Weapon: none")

        slots = [card.label if card else "--" for card in session.room_slots()]
        lines.append(f"Room: {' '.join(slots)}")

        if session.is_finished:
            lines.append(f"Status: {session.status.value}")
            lines.append(f"Score: {session.compute_score()}")
            if session.killer_card is not None:
                lines.append(f"Killed by: {cards_to_str([session.killer_card])}")

        lines.append("=" * 50)

        output = "\n".join(lines)
        if self.render_mode == "human":
            print(output)
        return output

    def close(self):
        pass

    @property
    def state(self) -> Optional[GameSession]:
        """Current session (for agents and debugging)"""
        return self._session

    def get_legal_actions(self) -> List[Action]:
        if self._session is None:
            return []
        return self._session.get_legal_actions()

    def sample_action(self) -> Action:
        """Uniformly sample a legal action"""
        legal_actions = self.get_legal_actions()
        if not legal_actions:
            return Action.avoid()
        idx = self.np_random.integers(len(legal_actions))
        return legal_actions[idx]


def make_env(
    env_id: str = "Scoundrel-v1",
    **kwargs
) -> ScoundrelEnv:
    """
    Factory: create an environment

    Args:
        env_id: environment id
        **kwargs: ScoundrelEnv arguments

    Returns:
        ScoundrelEnv
    """
    return ScoundrelEnv(**kwargs)
