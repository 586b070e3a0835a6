# src/main.py - v1
"""CLI entry point: match, predict and stats commands.

Usage:
    enpensent match <target.json> --pool <pool.json> [--min-similarity X] [--limit N] [--domain D]
    enpensent predict <target.json> --pool <pool.json> --position N --length M [--domain D]
    enpensent stats <pool.json> [--domain D]

A pool file is a JSON list of patterns (or ``{"patterns": [...]}``).
Entries with a ``domain`` and ``createdAt`` are full persisted patterns;
others are minimal ``{id, signature, outcome}`` candidates.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from enpensent.version import __version__

logger = logging.getLogger(__name__)

DEFAULT_DOMAIN = "generic"


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        _setup_logging(args.verbose)
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="enpensent",
        description=f"En Pensent v{__version__} - temporal pattern matching and prediction",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- match ---
    p_match = subparsers.add_parser(
        "match", help="Rank pool patterns by similarity to a target signature",
    )
    p_match.add_argument("target", type=Path, help="Target signature JSON")
    p_match.add_argument("--pool", type=Path, required=True, help="Pattern pool JSON")
    p_match.add_argument(
        "--min-similarity", type=float, default=None,
        help="Minimum similarity in [0, 1] (default: settings)",
    )
    p_match.add_argument(
        "--limit", type=int, default=None,
        help="Maximum number of matches (default: settings)",
    )
    p_match.add_argument(
        "--archetype", action="append", dest="archetypes", default=None,
        help="Only match this archetype (repeatable)",
    )
    p_match.add_argument(
        "--domain", default=None,
        help="Domain name, selects the built-in registry (default: taken from the pool)",
    )
    p_match.set_defaults(func=_cmd_match)

    # --- predict ---
    p_predict = subparsers.add_parser(
        "predict", help="Print a hybrid prediction as JSON",
    )
    p_predict.add_argument("target", type=Path, help="Target signature JSON")
    p_predict.add_argument("--pool", type=Path, required=True, help="Pattern pool JSON")
    p_predict.add_argument("--position", type=int, required=True, help="Current position")
    p_predict.add_argument("--length", type=int, required=True, help="Expected total length")
    p_predict.add_argument(
        "--domain", default=None,
        help=f"Domain name, selects the built-in registry (default: taken from the pool, else {DEFAULT_DOMAIN})",
    )
    p_predict.set_defaults(func=_cmd_predict)

    # --- stats ---
    p_stats = subparsers.add_parser(
        "stats", help="Show pattern pool statistics",
    )
    p_stats.add_argument("pool", type=Path, help="Pattern pool JSON")
    p_stats.add_argument(
        "--domain", default=None,
        help="Restrict to one domain (default: every domain in the pool)",
    )
    p_stats.set_defaults(func=_cmd_stats)

    return parser


async def _cmd_match(args: argparse.Namespace) -> int:
    """Rank pool patterns against a target signature."""
    from enpensent.archetypes.relatedness import create_relatedness
    from enpensent.config.settings import load_settings
    from enpensent.matching.matcher import MatchOptions, find_similar_patterns

    settings = load_settings()
    target = _load_signature(args.target)
    pool = _load_pool(args.pool)
    domain = args.domain or _infer_domain(pool)

    options = MatchOptions(
        min_similarity=(
            settings.min_similarity if args.min_similarity is None else args.min_similarity
        ),
        limit=settings.match_limit if args.limit is None else args.limit,
        archetype_filter=args.archetypes,
    )
    matches = find_similar_patterns(
        target, pool, options,
        weights=settings.similarity_weights(),
        relatedness=create_relatedness(settings.relatedness, _builtin_registry(domain)),
    )

    print(f"\n{len(matches)} match(es) for {target.fingerprint} in {len(pool)} pattern(s):")
    for rank, match in enumerate(matches, start=1):
        print(
            f"  {rank:3d}. {match.pattern_id:<24s} {match.similarity:.3f}  "
            f"{match.signature.archetype:<24s} -> {match.outcome}"
        )
    return 0


async def _cmd_predict(args: argparse.Namespace) -> int:
    """Run the facade over an in-memory copy of the pool."""
    from enpensent.api.facade import predict
    from enpensent.api.models import PredictionRequest
    from enpensent.config.settings import load_settings
    from enpensent.storage.memory_store import MemoryPatternStore

    settings = load_settings()
    target = _load_signature(args.target)
    pool = _load_pool(args.pool)
    domain = args.domain or _infer_domain(pool)
    patterns = _as_persisted(pool, domain)
    outside = sum(1 for p in patterns if p.domain != domain)
    if outside:
        logger.warning("Ignoring %d pool pattern(s) outside domain %s", outside, domain)
    store = MemoryPatternStore(patterns)

    request = PredictionRequest(
        domain=domain,
        signature=target,
        current_position=args.position,
        total_expected_length=args.length,
    )
    result = await predict(request, store, settings=settings)
    print(result.prediction.model_dump_json(indent=2, by_alias=True))
    return 0


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Display pattern statistics per domain."""
    from enpensent.storage.stats import compute_pattern_stats

    patterns = _as_persisted(_load_pool(args.pool), args.domain or DEFAULT_DOMAIN)
    domains = [args.domain] if args.domain else sorted({p.domain for p in patterns})

    for domain in domains:
        stats = compute_pattern_stats(patterns, domain)
        print(f"\nStatistics for {domain}:")
        print(f"  Patterns:          {stats.total_patterns}")
        print(f"  Average intensity: {stats.average_intensity:.3f}")
        for archetype, count in stats.by_archetype.items():
            print(f"  archetype {archetype:<24s} {count}")
        for outcome, count in stats.by_outcome.items():
            print(f"  outcome   {outcome:<24s} {count}")
    return 0


# --- Pool I/O ---


def _read_json(path: Path) -> Any:
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return json.loads(path.read_text(encoding="utf-8"))


def _load_signature(path: Path):
    from enpensent.core.models import TemporalSignature

    data = _read_json(path)
    if isinstance(data, dict) and "signature" in data:
        data = data["signature"]
    return TemporalSignature.model_validate(data)


def _load_pool(path: Path) -> list:
    """Load pool entries as PersistedPattern or PatternCandidate."""
    from enpensent.core.models import PatternCandidate, PersistedPattern

    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("patterns", [])
    if not isinstance(data, list):
        raise ValueError(f"Pool file must contain a list of patterns: {path}")

    pool = []
    for item in data:
        has_created = "created_at" in item or "createdAt" in item
        if "domain" in item and has_created:
            pool.append(PersistedPattern.model_validate(item))
        else:
            pool.append(PatternCandidate.model_validate(item))
    logger.debug("Loaded %d pool entries from %s", len(pool), path)
    return pool


def _infer_domain(pool: list) -> str:
    """Domain shared by the pool's persisted patterns, else the default."""
    from enpensent.core.models import PersistedPattern

    domains = sorted({e.domain for e in pool if isinstance(e, PersistedPattern)})
    if len(domains) > 1:
        raise ValueError(f"Pool spans several domains ({', '.join(domains)}); pass --domain")
    return domains[0] if domains else DEFAULT_DOMAIN


def _builtin_registry(domain: str):
    from enpensent.archetypes.models import RegistryError
    from enpensent.archetypes.registry import get_builtin_registry

    try:
        return get_builtin_registry(domain)
    except RegistryError:
        logger.debug("No built-in registry for domain %s", domain)
        return None


def _as_persisted(pool: list, domain: str) -> list:
    """Promote candidates to persisted patterns of the given domain."""
    from enpensent.core.models import PersistedPattern

    now = datetime.now(timezone.utc)
    patterns = []
    for entry in pool:
        if isinstance(entry, PersistedPattern):
            patterns.append(entry)
            continue
        patterns.append(PersistedPattern(
            id=entry.id,
            domain=domain,
            fingerprint=entry.signature.fingerprint,
            archetype=entry.signature.archetype,
            outcome=entry.outcome,
            signature=entry.signature,
            metadata=entry.metadata or {},
            created_at=now,
        ))
    return patterns


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage from settings."""
    from enpensent.config.settings import load_settings
    from enpensent.logging.logger import setup_logging

    settings = load_settings()
    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file,
        rotation=settings.log_rotation,
        retention=settings.log_retention,
    )


if __name__ == "__main__":
    sys.exit(main())
