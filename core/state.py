"""
Game session

A single mutable session owned by its driver:
- commands: start_turn / avoid_room / face_room / resolve_card
- queries: status, score and read-only projections for renderers
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Any
from enum import Enum
import logging
import numbers
import time

from .cards import Card, build_deck, make_rng, shuffle
from .actions import Action, ActionGenerator, ROOM_SIZE, cards_needed
from .rules import RuleEngine, MAX_HEALTH

logger = logging.getLogger(__name__)


class Status(Enum):
    """Game status"""
    PLAYING = "playing"
    WON = "won"        # dungeon cleared
    LOST = "lost"      # health reached zero


class LogKind(Enum):
    """Severity of a log entry"""
    TURN = "turn"      # turn separator
    INFO = "info"
    GOOD = "good"
    BAD = "bad"


class Rejection(Enum):
    """Why a command was rejected"""
    NOT_PLAYING = "not-playing"
    AVOID_TWICE = "avoid-twice"
    NO_CARDS = "no-cards"
    NEED_N = "need-n"
    BAD_INDEX = "bad-index"


@dataclass(frozen=True)
class CommandResult:
    """Outcome of a room command"""
    ok: bool
    reason: Optional[Rejection] = None

    @classmethod
    def success(cls) -> 'CommandResult':
        return cls(ok=True)

    @classmethod
    def reject(cls, reason: Rejection) -> 'CommandResult':
        return cls(ok=False, reason=reason)


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of resolving a single room card"""
    ok: bool
    card: Optional[Card] = None
    summary: str = ""
    reason: Optional[Rejection] = None


@dataclass(frozen=True)
class LogEntry:
    """
    One line of the move log

    Attributes:
        timestamp: milliseconds since the epoch (from the session clock)
        message: human readable text
        kind: severity
    """
    timestamp: int
    message: str
    kind: LogKind = LogKind.INFO


@dataclass
class Weapon:
    """
    Equipped weapon

    Attributes:
        card: the weapon card
        value: attack value
        stack: monsters defeated with this weapon (trophies)
        last_defeated: value of the last defeated monster, None before the first kill
    """
    card: Card
    value: int
    stack: List[Card] = field(default_factory=list)
    last_defeated: Optional[int] = None

    @classmethod
    def equip(cls, card: Card) -> 'Weapon':
        return cls(card=card, value=card.value)

    @property
    def cards(self) -> List[Card]:
        """The weapon card followed by its trophies"""
        return [self.card] + list(self.stack)

    def can_strike(self, monster_value: int) -> bool:
        return RuleEngine.can_use_weapon(self.last_defeated, monster_value)


def wall_clock_ms() -> int:
    return int(time.time() * 1000)


def _is_index(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@dataclass
class GameSession:
    """
    Scoundrel game session

    Attributes:
        deck: draw pile, index 0 is drawn first
        turn: turn number, starting at 1
        health: 0..MAX_HEALTH while alive, may drop below 0 on the killing blow
        weapon: equipped weapon
        potion_used_this_room: a potion already healed this room
        avoided_last_turn: the previous turn was an avoid
        carry_card: card left over from the last faced room
        killer_card: monster that dealt the lethal blow
        discard: discard pile
        room: cards currently in the room (0-4)
        log: append-only move log
        status: game status
        clock: time source for log timestamps
    """
    deck: List[Card]
    turn: int = 1
    health: int = MAX_HEALTH
    weapon: Optional[Weapon] = None
    potion_used_this_room: bool = False
    avoided_last_turn: bool = False
    carry_card: Optional[Card] = None
    killer_card: Optional[Card] = None
    discard: List[Card] = field(default_factory=list)
    room: List[Card] = field(default_factory=list)
    log: List[LogEntry] = field(default_factory=list)
    status: Status = Status.PLAYING
    clock: Callable[[], int] = field(default=wall_clock_ms, repr=False, compare=False)

    @classmethod
    def new(
        cls,
        seed: Optional[int] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> 'GameSession':
        """
        Create a fresh session

        Args:
            seed: shuffle seed (wall-clock time when omitted)
            clock: log timestamp source (wall-clock milliseconds when omitted)

        Returns:
            Session with a shuffled 44-card deck, full health, turn 1
        """
        deck = shuffle(build_deck(), make_rng(seed))
        return cls(deck=deck, clock=clock or wall_clock_ms)

    # ------------------------------------------------------------------
    # log
    # ------------------------------------------------------------------

    def log_msg(self, message: str, kind: LogKind = LogKind.INFO) -> LogEntry:
        entry = LogEntry(timestamp=int(self.clock()), message=message, kind=kind)
        self.log.append(entry)
        return entry

    def _reject(self, reason: Rejection) -> CommandResult:
        logger.debug("command rejected: %s (turn %d)", reason.value, self.turn)
        return CommandResult.reject(reason)

    # ------------------------------------------------------------------
    # commands
    # ------------------------------------------------------------------

    def draw_to_room(self) -> None:
        """Refill the room: carry card first, then draw from the deck head"""
        if not self.room and self.carry_card is not None:
            self.room.append(self.carry_card)
            self.carry_card = None
        while len(self.room) < ROOM_SIZE and self.deck:
            self.room.append(self.deck.pop(0))

    def start_turn(self) -> None:
        """Begin a turn: reset the potion flag and fill the room"""
        if self.status != Status.PLAYING:
            return
        self.potion_used_this_room = False
        self.log_msg(f"Turn {self.turn}", LogKind.TURN)
        self.draw_to_room()

    def avoid_room(self) -> CommandResult:
        """
        Skip the room, sending every card to the bottom of the deck

        Returns:
            CommandResult, rejected with NOT_PLAYING or AVOID_TWICE
        """
        if self.status != Status.PLAYING:
            return self._reject(Rejection.NOT_PLAYING)
        if self.avoided_last_turn:
            return self._reject(Rejection.AVOID_TWICE)

        if len(self.room) < ROOM_SIZE:
            self.draw_to_room()
        to_bottom = list(self.room)
        self.room = []
        self.deck.extend(to_bottom)
        self.avoided_last_turn = True
        self.turn += 1
        self.log_msg(
            f"Avoided the room. {len(to_bottom)} cards go to the bottom.",
            LogKind.INFO,
        )
        self.check_end()
        return CommandResult.success()

    def can_resolve_card(self, index: int) -> bool:
        if self.status != Status.PLAYING:
            return False
        return _is_index(index) and 0 <= index < len(self.room)

    def resolve_card(self, index: int) -> ResolveResult:
        """
        Take the room card at index and apply its effect

        Args:
            index: position in the current room

        Returns:
            ResolveResult with the card and a log summary
        """
        if self.status != Status.PLAYING:
            return ResolveResult(ok=False, reason=Rejection.NOT_PLAYING)
        if not self.can_resolve_card(index):
            return ResolveResult(ok=False, reason=Rejection.BAD_INDEX)

        card = self.room.pop(index)
        if card.is_weapon:
            summary = self._equip(card)
        elif card.is_potion:
            summary = self._drink(card)
        else:
            summary = self._fight(card)

        # death is checked after every card, not only at room end
        if RuleEngine.is_dead(self.health):
            if card.is_monster and self.killer_card is None:
                self.killer_card = card
            self.status = Status.LOST
            self.log_msg("You died…", LogKind.BAD)

        return ResolveResult(ok=True, card=card, summary=summary)

    def _equip(self, card: Card) -> str:
        if self.weapon is not None:
            self.discard.extend(self.weapon.cards)
        self.weapon = Weapon.equip(card)
        summary = f"Equipped {card.label}"
        self.log_msg(summary, LogKind.GOOD)
        return summary

    def _drink(self, card: Card) -> str:
        self.discard.append(card)
        if self.potion_used_this_room:
            summary = f"Discarded extra potion {card.label}"
            self.log_msg(summary, LogKind.INFO)
            return summary

        before = self.health
        self.health = RuleEngine.heal(self.health, card.value)
        self.potion_used_this_room = True
        summary = f"Drank {card.label} and healed {self.health - before}"
        self.log_msg(summary, LogKind.GOOD)
        return summary

    def _fight(self, card: Card) -> str:
        weapon = self.weapon
        if weapon is None:
            self.health -= card.value
            self.discard.append(card)
            summary = f"Bare-handed vs {card.label} → took {card.value} damage"
            self.log_msg(summary, LogKind.BAD)
            return summary

        if not weapon.can_strike(card.value):
            self.health -= card.value
            self.discard.append(card)
            summary = (
                f"Weapon blocked (last {weapon.last_defeated}). "
                f"Took {card.value} from {card.label}"
            )
            self.log_msg(summary, LogKind.BAD)
            return summary

        damage = RuleEngine.weapon_damage(card.value, weapon.value)
        if damage > 0:
            self.health -= damage
            self.discard.append(card)
            summary = f"Hit {card.label} with {weapon.card.label} → took {damage}"
            self.log_msg(summary, LogKind.BAD)
            return summary

        weapon.stack.append(card)
        weapon.last_defeated = card.value
        summary = f"Defeated {card.label} with {weapon.card.label}"
        self.log_msg(summary, LogKind.GOOD)
        return summary

    def face_room(self, selected_indices: Sequence[int]) -> CommandResult:
        """
        Face the room, resolving the selected cards in the given order

        With a full room three cards are resolved and the fourth is carried
        into the next room. With fewer cards (end of deck) every card must be
        chosen and nothing is carried.

        Args:
            selected_indices: list or tuple of room positions, in resolution order

        Returns:
            CommandResult, rejected with NOT_PLAYING, NO_CARDS, NEED_N or BAD_INDEX
        """
        if self.status != Status.PLAYING:
            return self._reject(Rejection.NOT_PLAYING)
        if not self.room:
            return self._reject(Rejection.NO_CARDS)
        self.draw_to_room()

        if not isinstance(selected_indices, (list, tuple)):
            return self._reject(Rejection.BAD_INDEX)
        if len(selected_indices) != cards_needed(len(self.room)):
            return self._reject(Rejection.NEED_N)
        if not all(_is_index(i) for i in selected_indices):
            return self._reject(Rejection.BAD_INDEX)
        selected = [int(i) for i in selected_indices]
        if len(set(selected)) != len(selected):
            return self._reject(Rejection.BAD_INDEX)
        if any(i < 0 or i >= len(self.room) for i in selected):
            return self._reject(Rejection.BAD_INDEX)

        original = list(self.room)
        chosen = [original[i] for i in selected]
        carry = None
        if len(original) == ROOM_SIZE:
            carry = next(c for i, c in enumerate(original) if i not in selected)

        self.potion_used_this_room = False

        for card in chosen:
            if self.status != Status.PLAYING:
                break
            index = next(i for i, c in enumerate(self.room) if c.id == card.id)
            self.resolve_card(index)

        if self.status == Status.PLAYING:
            self.carry_card = carry
            self.room = []
            self.turn += 1
            self.avoided_last_turn = False
            if carry is not None:
                self.log_msg(f"Carrying {carry.label} forward", LogKind.INFO)

        self.check_end()
        return CommandResult.success()

    def apply_action(self, action: Action) -> CommandResult:
        """Dispatch a room-level Action to avoid_room / face_room"""
        if action.is_avoid:
            return self.avoid_room()
        return self.face_room(action.indices)

    def check_end(self) -> Status:
        """Re-evaluate win/loss; loss takes priority"""
        if self.status != Status.PLAYING:
            return self.status
        if RuleEngine.is_dead(self.health):
            self.status = Status.LOST
        elif RuleEngine.is_cleared(self.deck, self.room, self.carry_card):
            self.status = Status.WON
        return self.status

    # ------------------------------------------------------------------
    # queries
    # ------------------------------------------------------------------

    def compute_score(self) -> int:
        remaining = RuleEngine.remaining_cards(self.deck, self.room, self.carry_card)
        return RuleEngine.calculate_score(self.status.value, self.health, remaining)

    def get_legal_actions(self) -> List[Action]:
        """
        Room commands the session accepts right now

        Returns:
            Empty list once the game is over
        """
        if self.status != Status.PLAYING:
            return []
        generator = ActionGenerator(len(self.room), can_avoid=not self.avoided_last_turn)
        return generator.generate_all()

    def card_total(self) -> int:
        """Cards across every pile; always 44"""
        total = len(self.deck) + len(self.discard) + len(self.room)
        if self.carry_card is not None:
            total += 1
        if self.weapon is not None:
            total += len(self.weapon.cards)
        return total

    @property
    def is_finished(self) -> bool:
        return self.status != Status.PLAYING

    @property
    def max_health(self) -> int:
        return MAX_HEALTH

    @property
    def weapon_value(self) -> Optional[int]:
        return self.weapon.value if self.weapon else None

    @property
    def weapon_last_defeated(self) -> Optional[int]:
        return self.weapon.last_defeated if self.weapon else None

    @property
    def last_defeated_card(self) -> Optional[Card]:
        """Most recent trophy of the equipped weapon"""
        if self.weapon and self.weapon.stack:
            return self.weapon.stack[-1]
        return None

    @property
    def deck_count(self) -> int:
        return len(self.deck)

    @property
    def discard_count(self) -> int:
        return len(self.discard)

    def room_slots(self) -> List[Optional[Card]]:
        """The room padded with None placeholders to ROOM_SIZE slots"""
        return list(self.room) + [None] * (ROOM_SIZE - len(self.room))

    def view(self) -> Dict[str, Any]:
        """Read-only projection for renderers"""
        return {
            "health": self.health,
            "max_health": MAX_HEALTH,
            "weapon_value": self.weapon_value,
            "weapon_last_defeated": self.weapon_last_defeated,
            "turn": self.turn,
            "deck_count": self.deck_count,
            "discard_count": self.discard_count,
            "room": self.room_slots(),
            "log": list(self.log),
            "status": self.status.value,
            "killer_card": self.killer_card,
            "score": self.compute_score(),
        }
