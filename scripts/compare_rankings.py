#!/usr/bin/env python3
"""Compare oracle and fallback rankings for one stored talent.

Loads the talent and catalog from SQLite, ranks the pre-filtered catalog with
an LLM provider and with the fallback scorer (jitter off), and prints both
rankings side by side with simple agreement metrics.

Usage:
    python scripts/compare_rankings.py --talent t-123
    python scripts/compare_rankings.py --talent t-123 --provider anthropic
    python scripts/compare_rankings.py --talent t-123 --db data/career_match.db --top 8
"""

import argparse
import asyncio
import logging
import statistics
import sys
from pathlib import Path

# Ensure project root is on the path when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

from career_match.core.config import OracleConfig, Settings
from career_match.core.db import find_talent, init_db
from career_match.core.errors import MatchError, OracleError
from career_match.core.schemas import MatchCandidate
from career_match.pipeline.oracle import build_oracle
from career_match.pipeline.prefilter import filter_catalog
from career_match.pipeline.prompt import build_ranking_prompt
from career_match.pipeline.reconciler import reconcile
from career_match.pipeline.scorer import FallbackScorer, no_jitter
from career_match.profile.normalizer import normalize
from career_match.stores.base import fetch_catalog
from career_match.stores.sqlite import SqliteCatalogStore

logging.basicConfig(level=logging.WARNING)
logger = logging.getLogger(__name__)


def _print_table(
    oracle_ranked: list[MatchCandidate],
    fallback_ranked: list[MatchCandidate],
    top: int,
) -> None:
    """Print the two rankings next to each other."""
    header = f"{'#':>2}  {'Oracle':<34} {'Score':>5}   {'Fallback':<34} {'Score':>5}"
    print("\n" + "=" * len(header))
    print(header)
    print("=" * len(header))
    for i in range(top):
        left = oracle_ranked[i] if i < len(oracle_ranked) else None
        right = fallback_ranked[i] if i < len(fallback_ranked) else None
        left_id = left.catalog_item_id[:34] if left else "-"
        right_id = right.catalog_item_id[:34] if right else "-"
        left_score = str(left.score) if left else ""
        right_score = str(right.score) if right else ""
        print(f"{i + 1:>2}  {left_id:<34} {left_score:>5}   {right_id:<34} {right_score:>5}")
    print("=" * len(header))


def _print_agreement(
    oracle_ranked: list[MatchCandidate],
    fallback_ranked: list[MatchCandidate],
    top: int,
) -> None:
    oracle_top = {c.catalog_item_id for c in oracle_ranked[:top]}
    fallback_top = {c.catalog_item_id for c in fallback_ranked[:top]}
    fallback_scores = {c.catalog_item_id: c.score for c in fallback_ranked}
    diffs = [
        abs(c.score - fallback_scores[c.catalog_item_id])
        for c in oracle_ranked
        if c.catalog_item_id in fallback_scores
    ]
    print(f"\nTop-{top} overlap: {len(oracle_top & fallback_top)}/{top}")
    if diffs:
        print(f"Mean absolute score difference: {statistics.mean(diffs):.1f} points")


async def _rank_with_oracle(provider: str, model: str | None, prompt: str) -> str:
    oracle = build_oracle(OracleConfig(provider=provider, model=model))
    assert oracle is not None
    return await oracle.rank(prompt)


def main() -> None:
    parser = argparse.ArgumentParser(description="Compare oracle and fallback rankings")
    parser.add_argument("--talent", required=True, help="talentId of a stored profile")
    parser.add_argument("--db", default=None, help="SQLite DB path (default: from settings)")
    parser.add_argument("--config", default=None, help="Settings YAML path")
    parser.add_argument("--provider", default="gemini", help="LLM provider (default: gemini)")
    parser.add_argument("--model", default=None, help="Model override")
    parser.add_argument("--top", type=int, default=5, help="Rows to compare (default: 5)")
    args = parser.parse_args()

    settings = Settings.from_yaml(args.config) if args.config else Settings()
    db_path = args.db or settings.database.path
    if not Path(db_path).exists():
        print(f"ERROR: DB not found: {db_path}")
        sys.exit(1)

    conn = init_db(db_path)
    stored = find_talent(conn, args.talent)
    if stored is None:
        print(f"ERROR: talent not found: {args.talent}")
        sys.exit(1)

    try:
        profile = normalize({}, stored, max_free_text=settings.matching.max_free_text_length)
    except MatchError as e:
        print(f"ERROR: {e}")
        sys.exit(1)

    catalog = asyncio.run(fetch_catalog(SqliteCatalogStore(conn)))
    conn.close()
    if not catalog:
        print("No career paths in the database. Run: python main.py import-catalog <file>")
        sys.exit(0)

    filtered = filter_catalog(
        profile,
        catalog,
        max_size=settings.matching.prefilter_max_size,
        floor=settings.matching.prefilter_floor,
        weights=settings.prefilter_weights,
    )
    print(f"Profile: {profile.stage.value}; {len(filtered)}/{len(catalog)} paths after pre-filter")

    fallback_ranked = FallbackScorer(settings.fallback_weights, jitter=no_jitter).rank(
        profile, filtered
    )

    print(f"\nRanking with {args.provider} ({args.model or 'default model'})...")
    prompt = build_ranking_prompt(profile, filtered, args.top)
    try:
        raw = asyncio.run(_rank_with_oracle(args.provider, args.model, prompt))
        oracle_ranked = reconcile(raw, filtered, profile.stage, catalog)
    except (OracleError, ValueError, ImportError) as e:
        print(f"  [ERROR] oracle ranking failed: {e}")
        oracle_ranked = []

    _print_table(oracle_ranked, fallback_ranked, args.top)
    if oracle_ranked:
        _print_agreement(oracle_ranked, fallback_ranked, args.top)

    print("\nDone.")


if __name__ == "__main__":
    main()
