"""
Evaluation Layer - agents and evaluation

Modules:
    evaluator: agents and the evaluator
    metrics: evaluation metrics
    config: evaluation configuration
"""
from .evaluator import (
    EvalResult,
    Agent,
    RandomAgent,
    GreedyAgent,
    Evaluator,
    create_agent,
)
from .metrics import (
    GameMetrics,
    MetricsCollector,
)
from .config import EvalConfig

__all__ = [
    # evaluator
    "EvalResult",
    "Agent",
    "RandomAgent",
    "GreedyAgent",
    "Evaluator",
    "create_agent",
    # metrics
    "GameMetrics",
    "MetricsCollector",
    # config
    "EvalConfig",
]
