"""
Session snapshots

Serializable form of every session field, used for persistence.

Schema versions:
    1: unversioned saves; suits may be symbols, the weapon may be stored as
       {value, stack: [numbers], lastDefeated} without its card, and
       killerCard may be missing
    2: current; explicit "version" key, suit names, full weapon shape
"""
from typing import Any, Callable, Dict, List, Optional
import copy

from .cards import RANKS, Card, Suit, parse_suit
from .rules import MAX_HEALTH
from .state import GameSession, LogEntry, LogKind, Status, Weapon, wall_clock_ms


SNAPSHOT_VERSION = 2


class SnapshotError(ValueError):
    """Snapshot data cannot be turned into a session"""


def card_to_dict(card: Optional[Card]) -> Optional[Dict[str, Any]]:
    if card is None:
        return None
    return {
        "suit": card.suit.value,
        "rank": card.rank,
        "value": card.value,
        "type": card.card_type.value,
        "id": card.id,
    }


def card_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Card]:
    """
    Rebuild a card; the type is derived from the suit, not trusted

    Raises:
        SnapshotError: unknown suit or rank, or missing fields
    """
    if data is None:
        return None
    try:
        suit = parse_suit(data["suit"])
        rank = str(data["rank"])
        card_id = str(data.get("id") or f"{suit.value}-{rank}")
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Invalid card: {data!r}") from e
    if rank not in RANKS:
        raise SnapshotError(f"Unknown rank in card: {data!r}")
    return Card.make(suit, rank, card_id)


def weapon_to_dict(weapon: Optional[Weapon]) -> Optional[Dict[str, Any]]:
    if weapon is None:
        return None
    return {
        "card": card_to_dict(weapon.card),
        "value": weapon.value,
        "stack": [card_to_dict(c) for c in weapon.stack],
        "lastDefeated": weapon.last_defeated,
    }


def to_snapshot(session: GameSession) -> Dict[str, Any]:
    """
    Serialize a session

    Args:
        session: session to save

    Returns:
        JSON-serializable dict
    """
    return {
        "version": SNAPSHOT_VERSION,
        "turn": session.turn,
        "health": session.health,
        "weapon": weapon_to_dict(session.weapon),
        "potionUsedThisRoom": session.potion_used_this_room,
        "avoidedLastTurn": session.avoided_last_turn,
        "carryCard": card_to_dict(session.carry_card),
        "killerCard": card_to_dict(session.killer_card),
        "deck": [card_to_dict(c) for c in session.deck],
        "discard": [card_to_dict(c) for c in session.discard],
        "room": [card_to_dict(c) for c in session.room],
        "log": [
            {"t": e.timestamp, "msg": e.message, "kind": e.kind.value}
            for e in session.log
        ],
        "status": session.status.value,
    }


def _migrate_v1(data: Dict[str, Any]) -> Dict[str, Any]:
    """Version 1 -> 2"""
    weapon = data.get("weapon")
    if weapon is not None and not weapon.get("card"):
        # older saves kept only the weapon value; the trophies were plain numbers
        value = int(weapon.get("value", 0))
        weapon = {
            "card": {
                "suit": Suit.DIAMONDS.value,
                "rank": str(value),
                "value": value,
                "type": "weapon",
                "id": f"restored-{Suit.DIAMONDS.value}-{value}",
            },
            "value": value,
            "stack": [],
            "lastDefeated": weapon.get("lastDefeated"),
        }
    data["weapon"] = weapon
    data.setdefault("killerCard", None)
    data["version"] = 2
    return data


MIGRATIONS: Dict[int, Callable[[Dict[str, Any]], Dict[str, Any]]] = {
    1: _migrate_v1,
}


def migrate(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Bring snapshot data up to SNAPSHOT_VERSION

    Args:
        data: snapshot of any known version (missing "version" means 1)

    Returns:
        Migrated copy; the input is not modified

    Raises:
        SnapshotError: not a dict, a version newer than this code, or
            fields an older schema cannot be migrated from
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot must be a dict, got {type(data).__name__}")
    data = copy.deepcopy(data)
    version = data.get("version", 1)
    if not isinstance(version, int) or version < 1 or version > SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {version!r}")
    try:
        while version < SNAPSHOT_VERSION:
            data = MIGRATIONS[version](data)
            version = data["version"]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Cannot migrate schema {version} snapshot: {e}") from e
    return data


def _cards(items: Optional[List[Dict[str, Any]]]) -> List[Card]:
    return [card_from_dict(item) for item in (items or [])]


def _weapon(data: Optional[Dict[str, Any]]) -> Optional[Weapon]:
    if data is None:
        return None
    card = card_from_dict(data["card"])
    return Weapon(
        card=card,
        value=int(data.get("value", card.value)),
        stack=_cards(data.get("stack")),
        last_defeated=data.get("lastDefeated"),
    )


def from_snapshot(
    data: Dict[str, Any],
    clock: Optional[Callable[[], int]] = None,
) -> GameSession:
    """
    Rebuild a session from a snapshot of any supported version

    Args:
        data: snapshot dict
        clock: log timestamp source for the restored session

    Returns:
        GameSession

    Raises:
        SnapshotError: malformed snapshot
    """
    data = migrate(data)
    try:
        return GameSession(
            deck=_cards(data.get("deck")),
            turn=int(data.get("turn", 1)),
            health=int(data.get("health", MAX_HEALTH)),
            weapon=_weapon(data.get("weapon")),
            potion_used_this_room=bool(data.get("potionUsedThisRoom", False)),
            avoided_last_turn=bool(data.get("avoidedLastTurn", False)),
            carry_card=card_from_dict(data.get("carryCard")),
            killer_card=card_from_dict(data.get("killerCard")),
            discard=_cards(data.get("discard")),
            room=_cards(data.get("room")),
            log=[
                LogEntry(
                    timestamp=int(e.get("t", 0)),
                    message=str(e.get("msg", "")),
                    kind=LogKind(e.get("kind", LogKind.INFO.value)),
                )
                for e in data.get("log") or []
            ],
            status=Status(data.get("status", Status.PLAYING.value)),
            clock=clock or wall_clock_ms,
        )
    except SnapshotError:
        raise
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise SnapshotError(f"Invalid snapshot: {e}") from e
