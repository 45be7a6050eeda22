"""Environment layer tests"""
import pytest
import numpy as np

from core.cards import Suit, Card, DECK_SIZE
from core.actions import Action
from core.state import GameSession, Status


def fixed_clock():
    return 0


class TestObservationBuilder:
    """ObservationBuilder tests"""

    def test_build(self):
        from env.observation import ObservationBuilder

        session = GameSession.new(seed=42, clock=fixed_clock)
        session.start_turn()
        obs = ObservationBuilder().build(session)

        assert obs.health[0] == 1.0
        assert obs.room.shape == (4, 5)
        assert obs.room[:, 0].sum() == 4
        assert obs.room_cards.shape == (4, DECK_SIZE)
        assert obs.room_cards.sum() == 4
        assert obs.deck.sum() == DECK_SIZE - 4
        assert obs.discard.sum() == 0
        assert obs.status == "playing"
        assert len(obs.legal_actions) == 25

    def test_weapon_features(self):
        from env.observation import ObservationBuilder
        from core.state import Weapon

        session = GameSession(
            deck=[],
            weapon=Weapon(
                card=Card.make(Suit.DIAMONDS, "7"),
                value=7,
                stack=[Card.make(Suit.CLUBS, "7")],
                last_defeated=7,
            ),
            clock=fixed_clock,
        )
        obs = ObservationBuilder().build(session)
        assert obs.weapon[0] == 1
        assert obs.weapon[1] == pytest.approx(0.5)
        assert obs.weapon[2] == pytest.approx(0.5)
        assert obs.weapon[3] == 1

    def test_negative_health(self):
        from env.observation import ObservationBuilder

        session = GameSession(deck=[], health=-5, status=Status.LOST, clock=fixed_clock)
        obs = ObservationBuilder().build(session)
        assert obs.health[0] == 0.0
        assert obs.legal_actions == []

    def test_to_flat_array(self):
        from env.observation import ObservationBuilder

        session = GameSession.new(seed=42, clock=fixed_clock)
        session.start_turn()
        flat = ObservationBuilder().build(session).to_flat_array()

        assert isinstance(flat, np.ndarray)
        assert flat.shape == (294,)


class TestRewardCalculator:
    """Reward tests"""

    def test_sparse(self):
        from env.reward import create_reward_calculator

        calc = create_reward_calculator("sparse")
        assert calc.compute(GameSession(deck=[], status=Status.WON)) == 1.0
        assert calc.compute(GameSession(deck=[], status=Status.LOST)) == -1.0
        assert calc.compute(GameSession(deck=[Card.make(Suit.CLUBS, "2")])) == 0.0

    def test_score(self):
        from env.reward import create_reward_calculator, WORST_SCORE

        calc = create_reward_calculator("score")
        assert WORST_SCORE == -208
        won = GameSession(deck=[], health=10, status=Status.WON)
        assert calc.compute(won) == pytest.approx(0.5)
        lost = GameSession(
            deck=[Card.make(Suit.CLUBS, "A"), Card.make(Suit.SPADES, "A")],
            health=-1,
            status=Status.LOST,
        )
        assert calc.compute(lost) == pytest.approx(-28 / 208)

    def test_shaped(self):
        from env.reward import RewardConfig, RewardCalculator, RewardType

        calc = RewardCalculator(RewardConfig(
            reward_type=RewardType.SHAPED,
            health_coef=0.1,
            avoid_penalty=0.05,
        ))
        session = GameSession(deck=[Card.make(Suit.CLUBS, "2")], health=15)
        assert calc.compute(session, prev_health=20) == pytest.approx(-0.5)
        assert calc.compute(session, prev_health=15, avoided=True) == pytest.approx(-0.05)

    def test_config_from_dict(self):
        from env.reward import RewardConfig, RewardType

        config = RewardConfig.from_dict({"reward_type": "shaped", "health_coef": 0.2, "x": 1})
        assert config.reward_type == RewardType.SHAPED
        assert config.health_coef == 0.2


class TestScoundrelEnv:
    """ScoundrelEnv tests"""

    def test_reset(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        obs, info = env.reset(seed=42)

        assert "room" in obs
        assert obs["room"].shape == (4, 5)
        assert info["status"] == "playing"
        assert info["turn"] == 1
        assert info["deck_count"] == DECK_SIZE - 4
        assert len(info["legal_actions"]) == 25
        assert info["legal_action_mask"].sum() == 25

    def test_observation_in_space(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        obs, _ = env.reset(seed=1)
        assert env.observation_space.contains(obs)

    def test_seeded_reset(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        env.reset(seed=5)
        room_a = list(env.state.room)
        env.reset(seed=5)
        assert env.state.room == room_a

    def test_step_index(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        env.reset(seed=42)
        obs, reward, terminated, truncated, info = env.step(0)

        assert info["turn"] == 2
        assert env.state.avoided_last_turn
        assert info["legal_action_mask"][0] == 0
        assert not truncated

    def test_step_action_object(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        env.reset(seed=42)
        _, _, _, _, info = env.step(Action.face([0, 1, 2]))
        assert "error" not in info

    def test_invalid_action(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv(invalid_action_penalty=-2.0)
        env.reset(seed=42)
        env.step(0)
        obs, reward, terminated, truncated, info = env.step(0)

        assert reward == -2.0
        assert not terminated
        assert info["error"] == "Invalid action"
        assert info["turn"] == 2

    def test_out_of_range(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        env.reset(seed=42)
        with pytest.raises(ValueError):
            env.step(41)
        with pytest.raises(ValueError):
            env.step("avoid")

    def test_step_before_reset(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        with pytest.raises(RuntimeError):
            env.step(0)

    def test_full_game(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv()
        env.reset(seed=42)

        done = False
        steps = 0
        while not done and steps < 200:
            action = env.sample_action()
            _, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            steps += 1

        assert done
        assert info["status"] in ("won", "lost")
        assert "score" in info
        assert -1.0 <= reward <= 1.0
        assert env.get_legal_actions() == []

    def test_reset_with_session(self):
        from env import ScoundrelEnv

        session = GameSession(
            deck=[],
            room=[Card.make(Suit.HEARTS, "3")],
            health=4,
            clock=fixed_clock,
        )
        env = ScoundrelEnv()
        env.reset(options={"session": session})
        assert env.state is session

        _, reward, terminated, _, info = env.step(Action.face([0]))
        assert terminated
        assert info["won"]
        assert info["score"] == 7
        assert reward == pytest.approx(7 / 20)

    def test_render_ansi(self):
        from env import ScoundrelEnv

        env = ScoundrelEnv(render_mode="ansi")
        env.reset(seed=3)
        text = env.render()
        assert "Turn 1" in text
        assert "Room:" in text

    def test_make_env(self):
        from env import make_env, ScoundrelEnv

        assert isinstance(make_env(reward_type="sparse"), ScoundrelEnv)


class TestWrappers:
    """Wrapper tests"""

    def test_flatten(self):
        from env import ScoundrelEnv, FlattenObservationWrapper

        env = FlattenObservationWrapper(ScoundrelEnv())
        obs, _ = env.reset(seed=1)
        assert obs.shape == env.observation_space.shape == (294,)

    def test_flatten_matches_flat_array(self):
        from env import ScoundrelEnv, FlattenObservationWrapper, ObservationBuilder

        env = FlattenObservationWrapper(ScoundrelEnv())
        obs, _ = env.reset(seed=3)
        expected = ObservationBuilder().build(env.unwrapped.state).to_flat_array()
        assert np.array_equal(obs, expected)

        obs, _, _, _, _ = env.step(0)
        expected = ObservationBuilder().build(env.unwrapped.state).to_flat_array()
        assert np.array_equal(obs, expected)

    def test_action_mask(self):
        from env import ScoundrelEnv, LegalActionMaskWrapper

        env = LegalActionMaskWrapper(ScoundrelEnv())
        _, info = env.reset(seed=1)
        assert info["action_mask"].sum() == 25
        _, _, _, _, info = env.step(0)
        assert info["action_mask"].sum() == 24

    def test_time_limit(self):
        from gymnasium.wrappers import TimeLimit
        from env import ScoundrelEnv

        env = TimeLimit(ScoundrelEnv(), max_episode_steps=2)
        env.reset(seed=1)
        _, _, _, truncated, _ = env.step(0)
        assert not truncated
        # illegal actions count too
        _, _, _, truncated, info = env.step(0)
        assert truncated
        assert info["error"] == "Invalid action"

    def test_episode_statistics(self):
        from env import ScoundrelEnv, wrap_env

        env = wrap_env(ScoundrelEnv(), flatten_obs=True)
        env.reset(seed=9)
        base = env.unwrapped

        done = False
        while not done:
            _, _, terminated, truncated, info = env.step(base.sample_action())
            done = terminated or truncated

        assert "episode" in info
        assert info["episode"]["status"] in ("won", "lost")
        assert info["episode"]["l"] > 0
        assert info["episode"]["invalid"] == 0
        assert info["episode"]["score"] == info["score"]
        assert "action_mask" in info
