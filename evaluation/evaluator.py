"""
Evaluator

Plays agents through the environment and measures how they do
"""
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass, field
import copy
import logging

import numpy as np

from core.actions import Action
from core.state import GameSession, Status

from .metrics import GameMetrics, MetricsCollector

logger = logging.getLogger(__name__)


@dataclass
class EvalResult:
    """Evaluation result"""
    win_rate: float
    avg_score: float
    avg_turns: float
    avg_health: float
    games_played: int
    extra_stats: Dict[str, float] = field(default_factory=dict)

    def __repr__(self) -> str:
        return (
            f"EvalResult(win_rate={self.win_rate:.2%}, "
            f"avg_score={self.avg_score:.2f}, "
            f"games={self.games_played})"
        )


class Agent:
    """Agent base class"""

    def __init__(self, name: str = "agent"):
        self.name = name

    def act(
        self,
        obs: Dict[str, Any],
        legal_actions: List[Action],
        session: Optional[GameSession] = None,
    ) -> Action:
        """Choose an action"""
        raise NotImplementedError

    def reset(self):
        pass


class RandomAgent(Agent):
    """Uniformly random agent"""

    def __init__(self, name: str = "random", seed: Optional[int] = None):
        super().__init__(name)
        self._rng = np.random.default_rng(seed)

    def act(
        self,
        obs: Dict[str, Any],
        legal_actions: List[Action],
        session: Optional[GameSession] = None,
    ) -> Action:
        if not legal_actions:
            return Action.avoid()
        idx = self._rng.integers(len(legal_actions))
        return legal_actions[idx]


class GreedyAgent(Agent):
    """
    One-step lookahead agent

    Simulates every legal action on a copy of the session and keeps the one
    with the best resulting position. Position value favours health, then a
    strong weapon that can still reach high monsters.
    """

    WIN_VALUE = 1000.0

    def __init__(self, name: str = "greedy", avoid_penalty: float = 0.5):
        super().__init__(name)
        self.avoid_penalty = avoid_penalty

    def act(
        self,
        obs: Dict[str, Any],
        legal_actions: List[Action],
        session: Optional[GameSession] = None,
    ) -> Action:
        if not legal_actions:
            return Action.avoid()
        if session is None:
            raise ValueError("GreedyAgent needs the session to look ahead")

        best_action = legal_actions[0]
        best_value = float("-inf")
        for action in legal_actions:
            value = self.evaluate_action(session, action)
            if value > best_value:
                best_value = value
                best_action = action
        return best_action

    def evaluate_action(self, session: GameSession, action: Action) -> float:
        trial = copy.deepcopy(session)
        trial.apply_action(action)
        value = self.position_value(trial)
        if action.is_avoid:
            value -= self.avoid_penalty
        return value

    @classmethod
    def position_value(cls, session: GameSession) -> float:
        if session.status == Status.WON:
            return cls.WIN_VALUE + session.health
        if session.status == Status.LOST:
            return -cls.WIN_VALUE + session.compute_score()

        value = float(session.health)
        weapon = session.weapon
        if weapon is not None:
            reach = weapon.last_defeated if weapon.last_defeated is not None else 15
            value += 0.5 * weapon.value + 0.25 * reach
        return value


class Evaluator:
    """
    Evaluator

    Runs an agent for a number of games in a fresh environment
    """

    def __init__(self, env_fn: Callable, max_steps: int = 200):
        self.env_fn = env_fn
        self.max_steps = max_steps
        self.collector = MetricsCollector()

    def play_game(self, agent: Agent, env, seed: Optional[int] = None) -> GameMetrics:
        """
        Play a single game

        Args:
            agent: agent to play
            env: ScoundrelEnv, possibly wrapped
            seed: game seed

        Returns:
            GameMetrics of the finished (or truncated) game
        """
        agent.reset()
        base = env.unwrapped
        obs, info = env.reset(seed=seed)
        done = False
        steps = 0
        avoids = 0
        total_reward = 0.0

        while not done and steps < self.max_steps:
            legal_actions = base.get_legal_actions()
            action = agent.act(obs, legal_actions, base.state)
            if action.is_avoid:
                avoids += 1
            obs, reward, terminated, truncated, info = env.step(action)
            total_reward += reward
            done = terminated or truncated
            steps += 1

        session = base.state
        return GameMetrics(
            agent=agent.name,
            won=session.status == Status.WON,
            score=session.compute_score(),
            turns=session.turn,
            health=session.health,
            avoids=avoids,
            killer=session.killer_card.label if session.killer_card else None,
            reward=total_reward,
        )

    def evaluate(
        self,
        agent: Agent,
        n_games: int = 100,
        seed: Optional[int] = None,
        verbose: bool = False,
        log_every: int = 10,
    ) -> EvalResult:
        """
        Evaluate an agent

        Args:
            agent: agent to evaluate
            n_games: number of games
            seed: seed of the first game; game i uses seed + i
            verbose: log progress
            log_every: progress interval in games

        Returns:
            EvalResult
        """
        env = self.env_fn()
        self.collector = MetricsCollector()
        wins = 0

        for game_idx in range(n_games):
            game_seed = seed + game_idx if seed is not None else None
            metrics = self.play_game(agent, env, seed=game_seed)
            self.collector.add_game(metrics)
            wins += int(metrics.won)

            if verbose and log_every and (game_idx + 1) % log_every == 0:
                logger.info(f"Game {game_idx + 1}/{n_games}, Win rate: {wins/(game_idx+1):.2%}")

        env.close()

        summary = self.collector.compute_metrics(agent.name)
        if not summary:
            return EvalResult(0.0, 0.0, 0.0, 0.0, 0)

        return EvalResult(
            win_rate=summary["win_rate"],
            avg_score=summary["avg_score"],
            avg_turns=summary["avg_turns"],
            avg_health=summary["avg_health"],
            games_played=int(summary["games"]),
            extra_stats={
                "score_std": summary["score_std"],
                "best_score": summary["best_score"],
                "avg_avoids": summary["avg_avoids"],
                "avg_reward": summary["avg_reward"],
                "reward_std": summary["reward_std"],
            },
        )


def create_agent(name: str, seed: Optional[int] = None) -> Agent:
    """
    Factory: agent by name

    Args:
        name: "random" or "greedy"
        seed: random agent seed

    Returns:
        Agent
    """
    if name == "random":
        return RandomAgent(seed=seed)
    if name == "greedy":
        return GreedyAgent()
    raise ValueError(f"Unknown agent: {name}")
