"""
Rule engine - combat, healing, end conditions and scoring

All methods are pure functions without state
"""
from typing import List, Optional, Sequence

from .cards import Card, monster_total


MAX_HEALTH = 20


class RuleEngine:
    """
    Scoundrel rule engine

    Weapon usability, damage, healing clamp, end conditions and score.
    All methods are static.
    """

    @staticmethod
    def clamp(n: int, low: int, high: int) -> int:
        return max(low, min(high, n))

    @staticmethod
    def can_use_weapon(last_defeated: Optional[int], monster_value: int) -> bool:
        """
        Monotonicity rule

        A weapon with no kills may strike anything; afterwards only monsters
        no stronger than the last one it defeated.

        Args:
            last_defeated: value of the last monster the weapon defeated
            monster_value: value of the monster to fight

        Returns:
            Whether the weapon may be used
        """
        if last_defeated is None:
            return True
        return monster_value <= last_defeated

    @staticmethod
    def weapon_damage(monster_value: int, weapon_value: int) -> int:
        """Damage taken when fighting with a usable weapon"""
        return max(0, monster_value - weapon_value)

    @staticmethod
    def heal(health: int, amount: int, max_health: int = MAX_HEALTH) -> int:
        """
        Health after drinking a potion

        Args:
            health: current health
            amount: potion value
            max_health: upper bound

        Returns:
            New health, clamped to [0, max_health]
        """
        return RuleEngine.clamp(health + amount, 0, max_health)

    @staticmethod
    def is_dead(health: int) -> bool:
        return health <= 0

    @staticmethod
    def is_cleared(deck: Sequence[Card], room: Sequence[Card], carry: Optional[Card]) -> bool:
        """The dungeon is cleared once no card is left to face"""
        return not deck and not room and carry is None

    @staticmethod
    def remaining_cards(
        deck: Sequence[Card],
        room: Sequence[Card],
        carry: Optional[Card],
    ) -> List[Card]:
        """Cards never faced: deck, room and carry"""
        cards = list(deck) + list(room)
        if carry is not None:
            cards.append(carry)
        return cards

    @staticmethod
    def calculate_score(
        outcome: Optional[str],
        health: int,
        remaining: Sequence[Card],
    ) -> int:
        """
        Final score

        Args:
            outcome: "won", "lost", or anything else while playing
            health: remaining health
            remaining: cards left in deck, room and carry

        Returns:
            Won: remaining health. Lost: minus the total value of the
            monsters never faced. Otherwise 0.
        """
        if outcome == "won":
            return health
        if outcome == "lost":
            return -monster_total(remaining)
        return 0
