"""
Room-level actions and the legal action generator

A turn ends with exactly one room command: avoid the room, or face it by
resolving an ordered selection of room positions.
"""
from enum import IntEnum
from dataclasses import dataclass
from typing import List, Tuple, Optional
import itertools


class ActionType(IntEnum):
    """Room command type"""
    AVOID = 0   # send the room to the bottom of the deck
    FACE = 1    # resolve the selected cards in order


# Room size and the number of cards resolved from a full room
ROOM_SIZE = 4
FACE_COUNT = 3


@dataclass(frozen=True, slots=True)
class Action:
    """
    Immutable room command

    Attributes:
        action_type: avoid or face
        indices: room positions in resolution order (empty for avoid)
    """
    action_type: ActionType
    indices: Tuple[int, ...] = ()

    @classmethod
    def avoid(cls) -> 'Action':
        """Build the AVOID action"""
        return cls(action_type=ActionType.AVOID)

    @classmethod
    def face(cls, indices) -> 'Action':
        """Build a FACE action; order is kept as given"""
        return cls(action_type=ActionType.FACE, indices=tuple(int(i) for i in indices))

    @property
    def is_avoid(self) -> bool:
        return self.action_type == ActionType.AVOID

    def carried_index(self, room_size: int) -> Optional[int]:
        """Position left in the room when a full room is faced"""
        if self.is_avoid or room_size != ROOM_SIZE:
            return None
        rest = [i for i in range(room_size) if i not in self.indices]
        return rest[0] if len(rest) == 1 else None

    def __len__(self) -> int:
        return len(self.indices)


def cards_needed(room_size: int) -> int:
    """Number of cards a face command must select"""
    return min(FACE_COUNT, room_size)


class ActionGenerator:
    """
    Legal action generator

    Produces every command the session would accept for the current room.
    """

    def __init__(self, room_size: int, can_avoid: bool = True):
        """
        Args:
            room_size: number of cards in the room (0-4)
            can_avoid: whether avoiding is allowed this turn
        """
        self.room_size = room_size
        self.can_avoid = can_avoid

    def generate_face(self) -> List[Action]:
        """
        All ordered selections of the required size

        Selection order changes the outcome (weapon sequencing), so
        permutations are distinct actions.
        """
        if self.room_size == 0:
            return []
        need = cards_needed(self.room_size)
        return [
            Action.face(perm)
            for perm in itertools.permutations(range(self.room_size), need)
        ]

    def generate_all(self) -> List[Action]:
        """
        All legal actions

        Returns:
            AVOID (when allowed) followed by the FACE actions
        """
        actions = []
        if self.can_avoid:
            actions.append(Action.avoid())
        actions.extend(self.generate_face())
        return actions
