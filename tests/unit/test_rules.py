"""Rule engine tests"""
import pytest

from core.cards import Suit, Card
from core.rules import RuleEngine, MAX_HEALTH


def monster(value):
    rank = {11: "J", 12: "Q", 13: "K", 14: "A"}.get(value, str(value))
    return Card.make(Suit.SPADES, rank)


class TestWeaponRules:
    """Weapon usability and damage"""

    def test_fresh_weapon(self):
        assert RuleEngine.can_use_weapon(None, 14)

    def test_monotonicity(self):
        assert RuleEngine.can_use_weapon(5, 5)
        assert RuleEngine.can_use_weapon(5, 3)
        assert not RuleEngine.can_use_weapon(5, 8)

    def test_damage(self):
        assert RuleEngine.weapon_damage(10, 7) == 3
        assert RuleEngine.weapon_damage(7, 7) == 0
        assert RuleEngine.weapon_damage(4, 9) == 0


class TestHealing:
    """Healing clamp"""

    def test_clamped(self):
        assert RuleEngine.heal(18, 5) == MAX_HEALTH

    def test_normal(self):
        assert RuleEngine.heal(10, 5) == 15

    def test_custom_max(self):
        assert RuleEngine.heal(8, 5, max_health=10) == 10

    def test_clamp(self):
        assert RuleEngine.clamp(-3, 0, 20) == 0
        assert RuleEngine.clamp(25, 0, 20) == 20
        assert RuleEngine.clamp(7, 0, 20) == 7


class TestEndConditions:
    """Death and clear checks"""

    def test_is_dead(self):
        assert RuleEngine.is_dead(0)
        assert RuleEngine.is_dead(-4)
        assert not RuleEngine.is_dead(1)

    def test_is_cleared(self):
        assert RuleEngine.is_cleared([], [], None)
        assert not RuleEngine.is_cleared([monster(2)], [], None)
        assert not RuleEngine.is_cleared([], [monster(2)], None)
        assert not RuleEngine.is_cleared([], [], monster(2))

    def test_remaining_cards(self):
        deck = [monster(2)]
        room = [monster(3)]
        carry = monster(4)
        remaining = RuleEngine.remaining_cards(deck, room, carry)
        assert [c.value for c in remaining] == [2, 3, 4]


class TestScore:
    """Final score"""

    def test_won(self):
        assert RuleEngine.calculate_score("won", 12, []) == 12

    def test_lost(self):
        remaining = [monster(4), monster(9)]
        assert RuleEngine.calculate_score("lost", -2, remaining) == -13

    def test_lost_ignores_non_monsters(self):
        remaining = [monster(4), Card.make(Suit.HEARTS, "9")]
        assert RuleEngine.calculate_score("lost", 0, remaining) == -4

    def test_playing(self):
        assert RuleEngine.calculate_score("playing", 15, [monster(4)]) == 0
