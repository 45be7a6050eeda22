#!/usr/bin/env python3
"""
Evaluation script

Usage:
    python scripts/evaluate.py --agent greedy --games 500
    python scripts/evaluate.py --compare --games 200
    python scripts/evaluate.py --config eval.json --output results.json
"""
import argparse
import logging
import sys
from pathlib import Path
import json

# add the project root to the path
ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(ROOT))

from env import ScoundrelEnv, wrap_env
from evaluation import EvalConfig, Evaluator, create_agent

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger(__name__)


def parse_args():
    parser = argparse.ArgumentParser(description="Scoundrel Evaluation")

    parser.add_argument("--config", type=str, help="JSON file with EvalConfig fields")
    parser.add_argument("--compare", action="store_true", help="Compare all agents")
    parser.add_argument(
        "--agent",
        type=str,
        choices=["random", "greedy"],
        help="Agent to evaluate",
    )
    parser.add_argument("--games", type=int, help="Number of games")
    parser.add_argument("--seed", type=int, help="Seed of the first game")
    parser.add_argument("--output", type=str, help="Output file for results")
    parser.add_argument("--verbose", action="store_true", help="Verbose output")

    return parser.parse_args()


def build_config(args) -> EvalConfig:
    """Config file first, command-line flags override it"""
    values = {}
    if args.config:
        with open(args.config) as f:
            values.update(json.load(f))
    if args.agent is not None:
        values["agent"] = args.agent
    if args.games is not None:
        values["n_games"] = args.games
    if args.seed is not None:
        values["seed"] = args.seed
    if args.output is not None:
        values["output"] = args.output
    if args.verbose and not values.get("log_every"):
        values["log_every"] = 10
    return EvalConfig.from_dict(values)


def evaluate_agent(config: EvalConfig, agent_name: str) -> dict:
    logger.info(f"Evaluating agent: {agent_name}")

    def env_fn():
        return wrap_env(
            ScoundrelEnv(reward_type=config.reward_type),
            action_mask=False,
            time_limit=config.max_steps,
        )

    evaluator = Evaluator(env_fn=env_fn, max_steps=config.max_steps)
    result = evaluator.evaluate(
        agent=create_agent(agent_name, seed=config.seed),
        n_games=config.n_games,
        seed=config.seed,
        verbose=config.log_every > 0,
        log_every=config.log_every,
    )

    logger.info("=" * 50)
    logger.info(f"Evaluation Results ({agent_name})")
    logger.info("=" * 50)
    logger.info(f"Win Rate: {result.win_rate:.2%}")
    logger.info(f"Average Score: {result.avg_score:.2f}")
    logger.info(f"Score Std: {result.extra_stats['score_std']:.2f}")
    logger.info(f"Best Score: {result.extra_stats['best_score']:.0f}")
    logger.info(f"Average Turns: {result.avg_turns:.1f}")
    logger.info(f"Average Final Health: {result.avg_health:.1f}")
    logger.info(f"Average Avoids: {result.extra_stats['avg_avoids']:.2f}")

    killers = evaluator.collector.killer_counts()
    if killers:
        top = sorted(killers.items(), key=lambda x: x[1], reverse=True)[:3]
        logger.info("Deadliest cards: " + ", ".join(f"{k} ({v})" for k, v in top))
    logger.info("=" * 50)

    return {
        "agent": agent_name,
        "win_rate": result.win_rate,
        "avg_score": result.avg_score,
        "avg_turns": result.avg_turns,
        "avg_health": result.avg_health,
        "games_played": result.games_played,
        **result.extra_stats,
    }


def main():
    args = parse_args()
    config = build_config(args)

    if args.compare:
        results = [evaluate_agent(config, name) for name in ("random", "greedy")]
    else:
        results = [evaluate_agent(config, config.agent)]

    if config.output:
        with open(config.output, "w") as f:
            json.dump(results if args.compare else results[0], f, indent=2)
        logger.info(f"Results saved to {config.output}")


if __name__ == "__main__":
    main()
