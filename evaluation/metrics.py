"""
Evaluation metrics

Per-game records and their aggregates
"""
from typing import Dict, List, Optional
from dataclasses import dataclass
from collections import defaultdict
import numpy as np


@dataclass
class GameMetrics:
    """Metrics of a single game"""
    agent: str
    won: bool
    score: int
    turns: int
    health: int
    avoids: int = 0
    killer: Optional[str] = None
    reward: float = 0.0


class MetricsCollector:
    """
    Metrics collector

    Collects game records and computes summary statistics
    """

    def __init__(self):
        self.games: List[GameMetrics] = []

    def add_game(self, metrics: GameMetrics):
        self.games.append(metrics)

    def compute_metrics(self, agent: Optional[str] = None) -> Dict[str, float]:
        """
        Compute summary statistics

        Args:
            agent: only this agent's games; None for all

        Returns:
            Metrics dict, empty when there are no games
        """
        games = [g for g in self.games if agent is None or g.agent == agent]
        if not games:
            return {}

        scores = np.array([g.score for g in games], dtype=np.float64)
        rewards = np.array([g.reward for g in games], dtype=np.float64)
        return {
            "games": len(games),
            "win_rate": float(np.mean([1 if g.won else 0 for g in games])),
            "avg_score": float(scores.mean()),
            "score_std": float(scores.std()),
            "best_score": float(scores.max()),
            "avg_turns": float(np.mean([g.turns for g in games])),
            "avg_health": float(np.mean([max(g.health, 0) for g in games])),
            "avg_avoids": float(np.mean([g.avoids for g in games])),
            "avg_reward": float(rewards.mean()),
            "reward_std": float(rewards.std()),
        }

    def killer_counts(self) -> Dict[str, int]:
        """How often each card dealt the killing blow"""
        counts: Dict[str, int] = defaultdict(int)
        for g in self.games:
            if g.killer:
                counts[g.killer] += 1
        return dict(counts)

    def reset(self):
        self.games.clear()

