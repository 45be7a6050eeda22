"""
Observation space encoding

Turns a GameSession into numpy features and maps room commands to a fixed
discrete action space.
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import itertools
import numpy as np

from core.cards import DECK_SIZE, CardType, cards_to_array
from core.actions import Action, ROOM_SIZE, FACE_COUNT
from core.rules import MAX_HEALTH
from core.state import GameSession


# Highest card value (ace)
MAX_CARD_VALUE = 14

# Per-slot room features: present, monster, weapon, potion, value
SLOT_FEATURES = 5

CARD_TYPES: Tuple[CardType, ...] = (CardType.MONSTER, CardType.WEAPON, CardType.POTION)

# Feature blocks in flat-vector order
OBSERVATION_KEYS: Tuple[str, ...] = (
    "health", "weapon", "room", "room_cards", "deck", "discard", "flags", "progress",
)


@dataclass
class Observation:
    """
    Structured observation

    Attributes:
        health: (1,) health / MAX_HEALTH
        weapon: (4,) has weapon, value, last defeated, has a kill
        room: (4, 5) per-slot features
        room_cards: (4, 44) per-slot one-hot
        deck: (44,) cards still in the deck (order hidden)
        discard: (44,) cards in the discard pile
        flags: (3,) potion used this room, avoided last turn, carry pending
        progress: (2,) deck size, turn
        legal_actions: legal Action list
        status: game status value
    """
    health: np.ndarray
    weapon: np.ndarray
    room: np.ndarray
    room_cards: np.ndarray
    deck: np.ndarray
    discard: np.ndarray
    flags: np.ndarray
    progress: np.ndarray
    legal_actions: List
    status: str

    def to_dict(self) -> Dict[str, np.ndarray]:
        return {key: getattr(self, key) for key in OBSERVATION_KEYS}

    def to_flat_array(self) -> np.ndarray:
        """
        Flatten into a single vector

        Feature size: 1 + 4 + 4*5 + 4*44 + 44 + 44 + 3 + 2 = 294
        """
        return np.concatenate([getattr(self, key).ravel() for key in OBSERVATION_KEYS])


class ObservationBuilder:
    """
    Observation builder

    Converts a GameSession into an Observation
    """

    def __init__(self, max_turns: int = 100):
        """
        Args:
            max_turns: turn count used to normalize the turn feature
        """
        self.max_turns = max_turns

    def build(self, session: GameSession) -> Observation:
        return Observation(
            health=np.array([max(session.health, 0) / MAX_HEALTH], dtype=np.float32),
            weapon=self._encode_weapon(session),
            room=self._encode_room(session),
            room_cards=self._encode_room_cards(session),
            deck=cards_to_array(session.deck),
            discard=cards_to_array(session.discard),
            flags=np.array([
                float(session.potion_used_this_room),
                float(session.avoided_last_turn),
                float(session.carry_card is not None),
            ], dtype=np.float32),
            progress=np.array([
                len(session.deck) / DECK_SIZE,
                min(session.turn, self.max_turns) / self.max_turns,
            ], dtype=np.float32),
            legal_actions=session.get_legal_actions(),
            status=session.status.value,
        )

    def _encode_weapon(self, session: GameSession) -> np.ndarray:
        result = np.zeros(4, dtype=np.float32)
        weapon = session.weapon
        if weapon is None:
            return result
        result[0] = 1
        result[1] = weapon.value / MAX_CARD_VALUE
        if weapon.last_defeated is not None:
            result[2] = weapon.last_defeated / MAX_CARD_VALUE
            result[3] = 1
        return result

    def _encode_room(self, session: GameSession) -> np.ndarray:
        """
        Per-slot features

        Returns:
            (4, 5) array; empty slots stay all zero
        """
        result = np.zeros((ROOM_SIZE, SLOT_FEATURES), dtype=np.float32)
        for i, card in enumerate(session.room[:ROOM_SIZE]):
            result[i, 0] = 1
            result[i, 1 + CARD_TYPES.index(card.card_type)] = 1
            result[i, 4] = card.value / MAX_CARD_VALUE
        return result

    def _encode_room_cards(self, session: GameSession) -> np.ndarray:
        result = np.zeros((ROOM_SIZE, DECK_SIZE), dtype=np.float32)
        for i, card in enumerate(session.room[:ROOM_SIZE]):
            result[i] = cards_to_array([card])
        return result


class ActionEncoder:
    """
    Action encoder

    Fixed discrete action space:
    - 0: avoid
    - then every ordered selection of 1, 2 or 3 distinct room positions
      (4 + 12 + 24 = 40 face actions)
    """

    def __init__(self):
        self._action_to_idx: Dict[Action, int] = {}
        self._idx_to_action: Dict[int, Action] = {}
        self._build_action_space()

    def _build_action_space(self):
        idx = 0

        avoid = Action.avoid()
        self._action_to_idx[avoid] = idx
        self._idx_to_action[idx] = avoid
        idx += 1

        # short selections only happen at the end of the deck
        for length in range(1, FACE_COUNT + 1):
            for perm in itertools.permutations(range(ROOM_SIZE), length):
                action = Action.face(perm)
                self._action_to_idx[action] = idx
                self._idx_to_action[idx] = action
                idx += 1

        self._num_actions = idx

    @property
    def num_actions(self) -> int:
        return self._num_actions

    def encode(self, action: Action) -> int:
        """
        Action to index

        Returns:
            Index, -1 when the action is outside the space
        """
        return self._action_to_idx.get(action, -1)

    def decode(self, idx: int) -> Optional[Action]:
        """Index to Action, None when out of range"""
        return self._idx_to_action.get(int(idx))

    def get_legal_action_indices(self, legal_actions: List[Action]) -> List[int]:
        indices = []
        for action in legal_actions:
            idx = self.encode(action)
            if idx >= 0:
                indices.append(idx)
        return indices

    def build_legal_mask(self, legal_actions: List[Action]) -> np.ndarray:
        """
        Legal action mask

        Returns:
            (num_actions,) float32 array of 0/1
        """
        mask = np.zeros(self._num_actions, dtype=np.float32)
        for idx in self.get_legal_action_indices(legal_actions):
            mask[idx] = 1
        return mask


# module-level singleton
_action_encoder: Optional[ActionEncoder] = None


def get_action_encoder() -> ActionEncoder:
    global _action_encoder
    if _action_encoder is None:
        _action_encoder = ActionEncoder()
    return _action_encoder
