"""Action tests"""
import pytest

from core.actions import (
    ActionType,
    Action,
    ActionGenerator,
    ROOM_SIZE,
    FACE_COUNT,
    cards_needed,
)


class TestActionType:
    """ActionType enum tests"""

    def test_values(self):
        assert ActionType.AVOID == 0
        assert ActionType.FACE == 1


class TestAction:
    """Action tests"""

    def test_avoid(self):
        action = Action.avoid()
        assert action.is_avoid
        assert action.indices == ()
        assert len(action) == 0

    def test_face_keeps_order(self):
        action = Action.face([2, 0, 3])
        assert not action.is_avoid
        assert action.indices == (2, 0, 3)
        assert len(action) == 3

    def test_hashable(self):
        actions = {Action.face([0, 1, 2]), Action.face([0, 1, 2]), Action.avoid()}
        assert len(actions) == 2

    def test_order_matters(self):
        assert Action.face([0, 1, 2]) != Action.face([2, 1, 0])

    def test_immutable(self):
        action = Action.avoid()
        with pytest.raises(AttributeError):
            action.indices = (1,)

    def test_carried_index(self):
        assert Action.face([0, 2, 3]).carried_index(ROOM_SIZE) == 1
        assert Action.face([0, 1]).carried_index(2) is None
        assert Action.avoid().carried_index(ROOM_SIZE) is None


class TestCardsNeeded:
    """cards_needed tests"""

    def test_full_room(self):
        assert cards_needed(ROOM_SIZE) == FACE_COUNT == 3

    def test_short_rooms(self):
        assert cards_needed(3) == 3
        assert cards_needed(2) == 2
        assert cards_needed(1) == 1
        assert cards_needed(0) == 0


class TestActionGenerator:
    """ActionGenerator tests"""

    def test_full_room(self):
        actions = ActionGenerator(4).generate_all()
        assert actions[0] == Action.avoid()
        # 4 * 3 * 2 ordered selections
        assert len(actions) == 1 + 24

    def test_no_avoid(self):
        actions = ActionGenerator(4, can_avoid=False).generate_all()
        assert len(actions) == 24
        assert all(not a.is_avoid for a in actions)

    def test_face_actions_distinct_indices(self):
        for action in ActionGenerator(4).generate_face():
            assert len(set(action.indices)) == 3
            assert all(0 <= i < 4 for i in action.indices)

    def test_short_rooms(self):
        assert len(ActionGenerator(3).generate_face()) == 6
        assert len(ActionGenerator(2).generate_face()) == 2
        assert ActionGenerator(1).generate_face() == [Action.face([0])]

    def test_empty_room(self):
        assert ActionGenerator(0).generate_face() == []
        assert ActionGenerator(0).generate_all() == [Action.avoid()]
