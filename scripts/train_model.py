"""
train_model.py: train and evaluate a win-probability model from a CSV.

The CSV needs ``season``, ``week``, ``home_team``, ``away_team`` and
``home_win`` columns plus one column per feature.  Hyperparameters come from
``EDGE_*`` environment variables (or ``.env``); see ``nfl_edge.config``.

Usage
-----
  python scripts/train_model.py games.csv
  python scripts/train_model.py games.csv --features spread total --split random --seed 42
  python scripts/train_model.py games.csv --save model.json --name "spread only"
  python scripts/train_model.py games.csv --loo 50 --top 5
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# Ensure the project root (one level up from scripts/) is on sys.path so that
# `from nfl_edge.xxx import ...` resolves when the script is run directly.
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import pandas as pd
from pydantic import ValidationError

from nfl_edge.config import BettingConfig, TrainingConfig
from nfl_edge.core.errors import EdgeModelError
from nfl_edge.core.features import DEFAULT_FEATURES
from nfl_edge.schemas import SavedModel, SplitSettings
from nfl_edge.services.game_loader import games_from_frame
from nfl_edge.services.loo import LOOInfluenceAnalyzer, influential_games
from nfl_edge.services.training import train_and_evaluate

logger = logging.getLogger("train_model")


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Train and evaluate an NFL home-win probability model."
    )
    parser.add_argument("csv", type=Path, help="Historical games CSV")
    parser.add_argument(
        "--features", nargs="+", default=list(DEFAULT_FEATURES),
        help="Feature columns, in model order (default: %(default)s)",
    )
    parser.add_argument("--split", choices=["time-based", "random"], default="time-based")
    parser.add_argument("--test-size", type=float, default=0.2)
    parser.add_argument("--seed", type=int, default=None, help="Shuffle seed for --split random")
    parser.add_argument("--save", type=Path, default=None, help="Write the saved model JSON here")
    parser.add_argument("--name", default=None, help="Saved model name (default: CSV stem)")
    parser.add_argument(
        "--loo", type=int, default=None, metavar="N",
        help="Run leave-one-out analysis on the N most recent games",
    )
    parser.add_argument("--top", type=int, default=None, help="Top-K games per LOO ranking")
    parser.add_argument("-v", "--verbose", action="store_true", help="Per-epoch DEBUG logs")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    )

    training_config = TrainingConfig.from_env()
    betting_config = BettingConfig.from_env()

    try:
        games = games_from_frame(pd.read_csv(args.csv))
        settings = SplitSettings(
            split_method=args.split, test_size=args.test_size, random_seed=args.seed
        )
        report = train_and_evaluate(
            games, args.features, settings.to_settings(), training_config
        )
        saved = SavedModel.from_report(report, name=args.name or args.csv.stem)

        output = {
            "model": saved.model_dump(mode="json"),
            "feature_importance": report.model.feature_importance(),
        }

        if args.loo is not None:
            analyzer = LOOInfluenceAnalyzer(training_config)
            results = analyzer.run(games, args.features, sample_size=args.loo)
            ranking = influential_games(results, top_n=args.top or betting_config.top_n)
            output["loo"] = {
                key: [
                    {
                        "game_index": r.game_index,
                        "matchup": f"{r.game.away_team} @ {r.game.home_team}",
                        "season": r.game.season,
                        "week": r.game.week,
                        "influence": r.influence,
                        "accuracy_delta": r.accuracy_delta,
                    }
                    for r in rows
                ]
                for key, rows in ranking.items()
            }
    except (EdgeModelError, ValidationError, FileNotFoundError, pd.errors.ParserError) as exc:
        logger.error("Training failed: %s", exc)
        return 1

    if args.save is not None:
        args.save.write_text(saved.model_dump_json(indent=2))
        logger.info("Saved model %s to %s", saved.id, args.save)

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
