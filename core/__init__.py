"""
Core Layer - pure game logic (no ML dependencies)

Modules:
    cards: card definitions, deck construction and encoding
    actions: room commands and legal action generation
    rules: rule engine
    state: game session
    snapshot: versioned session snapshots
    storage: key-value persistence
"""
from .cards import (
    Suit,
    CardType,
    Card,
    SUITS,
    RANKS,
    DECK_SIZE,
    build_deck,
    make_rng,
    shuffle,
    rank_to_value,
    cards_to_array,
    array_to_cards,
    cards_to_str,
)

from .actions import (
    ActionType,
    Action,
    ActionGenerator,
    ROOM_SIZE,
    FACE_COUNT,
    cards_needed,
)

from .rules import RuleEngine, MAX_HEALTH

from .state import (
    Status,
    LogKind,
    Rejection,
    CommandResult,
    ResolveResult,
    LogEntry,
    Weapon,
    GameSession,
)

from .snapshot import (
    SNAPSHOT_VERSION,
    SnapshotError,
    to_snapshot,
    from_snapshot,
    migrate,
)

from .storage import (
    SAVE_KEY,
    SaveStore,
    save_session,
    load_session,
)

__all__ = [
    # cards
    "Suit",
    "CardType",
    "Card",
    "SUITS",
    "RANKS",
    "DECK_SIZE",
    "build_deck",
    "make_rng",
    "shuffle",
    "rank_to_value",
    "cards_to_array",
    "array_to_cards",
    "cards_to_str",
    # actions
    "ActionType",
    "Action",
    "ActionGenerator",
    "ROOM_SIZE",
    "FACE_COUNT",
    "cards_needed",
    # rules
    "RuleEngine",
    "MAX_HEALTH",
    # state
    "Status",
    "LogKind",
    "Rejection",
    "CommandResult",
    "ResolveResult",
    "LogEntry",
    "Weapon",
    "GameSession",
    # snapshot
    "SNAPSHOT_VERSION",
    "SnapshotError",
    "to_snapshot",
    "from_snapshot",
    "migrate",
    # storage
    "SAVE_KEY",
    "SaveStore",
    "save_session",
    "load_session",
]
