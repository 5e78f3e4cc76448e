"""Enrich a CSV table with one AI function and store the classified results.

Usage:
    python -m aisql.tools.run_enrichment emails.csv --function sentiment
    python -m aisql.tools.run_enrichment emails.csv --function complete \
        --option guard_enable=true --option temperature=0.3 --label-kind guard
    python -m aisql.tools.run_enrichment images.csv --function classify \
        --key-column image_id --file-column file --param categories='["receipt", "invoice"]'
    python -m aisql.tools.run_enrichment emails.csv --estimate-only
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

from aisql.adapters.csv_loader.loader import load_records
from aisql.adapters.persistence.database import async_session_factory
from aisql.adapters.persistence.repositories import SqlResultRepository
from aisql.adapters.snowflake.cortex_adapter import SnowflakeCortexAdapter
from aisql.application.use_cases.enrich_records import EnrichRecordsUseCase
from aisql.application.use_cases.estimate_cost import EstimateCostUseCase
from aisql.application.use_cases.invoke_function import InvokeAIFunctionUseCase
from aisql.config import settings
from aisql.domain.errors import InvalidCallError
from aisql.domain.policies.decisions import STATUS_LABELS
from aisql.domain.value_objects.enums import AIFunction

logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")
logger = logging.getLogger(__name__)


def _parse_pairs(pairs: list[str]) -> dict[str, Any]:
    """Parse ``key=value`` pairs; values are read as JSON when they parse."""
    out: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got {pair!r}")
        try:
            out[key] = json.loads(raw)
        except json.JSONDecodeError:
            out[key] = raw
    return out


def _default_model(function: AIFunction, model: str | None) -> str | None:
    if model or not function.requires_model:
        return model
    if function == AIFunction.EMBED:
        return settings.default_embed_model
    return settings.default_complete_model


async def enrich(
    csv_path: Path,
    function: AIFunction,
    model: str | None,
    options: dict[str, Any],
    params: dict[str, Any],
    key_column: str,
    content_column: str | None,
    file_column: str | None,
    label_kind: str,
) -> dict[str, dict[str, float]]:
    """Run the enrichment and commit the results. Returns the status distribution."""
    records = load_records(
        csv_path, key_column=key_column, content_column=content_column, file_column=file_column
    )
    cortex = SnowflakeCortexAdapter()
    invoker = InvokeAIFunctionUseCase(
        cortex, sentiment_contract=settings.sentiment_contract, use_cache=settings.cache_results,
        cache_max_entries=settings.cache_max_entries,
        cache_ttl_seconds=settings.cache_ttl_seconds,
    )
    try:
        async with async_session_factory() as session:
            uc = EnrichRecordsUseCase(
                invoker,
                result_repo=SqlResultRepository(session),
                max_input_tokens=settings.max_input_tokens,
                token_model=settings.default_token_model,
                label_kind=label_kind,
            )
            report = await uc.execute(
                records, function, model=_default_model(function, model), options=options, **params
            )
            await session.commit()
    finally:
        cortex.close()

    print(f"\n{'='*50}")
    print(f"{function.sql_name} over {csv_path.name}: {report.total} records")
    for outcome in report.outcomes:
        print(f"  {outcome.record_key:<20} {outcome.label}")
    print(f"{'='*50}\n")
    return report.status_distribution()


async def estimate(csv_path: Path, key_column: str, content_column: str, model: str | None) -> None:
    records = load_records(csv_path, key_column=key_column, content_column=content_column)
    cortex = SnowflakeCortexAdapter()
    try:
        report = await EstimateCostUseCase(InvokeAIFunctionUseCase(cortex)).execute(
            {r.key: r.content for r in records if r.content},
            model=model or settings.default_token_model,
        )
    finally:
        cortex.close()

    print(f"\n{'='*50}")
    for key, tokens in report.token_counts.items():
        print(f"  {key:<20} {tokens:>6} tokens  {report.validation[key].value}")
    if report.uncounted:
        print(f"Could not count: {report.uncounted}")
    e = report.estimate
    print(f"Input tokens:  {e.input_tokens}")
    print(f"Output tokens: {e.estimated_output_tokens} (estimated)")
    print(f"Total cost:    ${e.total_cost_usd:.6f}")
    print(f"Guard overhead tokens: {e.guard_overhead_tokens}")
    print(f"{'='*50}\n")


def main():
    parser = argparse.ArgumentParser(description="Run a Cortex AI function over a CSV table")
    parser.add_argument("csv", type=str, help="CSV file, relative to --data-dir")
    parser.add_argument(
        "--data-dir", type=str, default=settings.csv_data_path,
        help=f"Directory containing CSV files (default: {settings.csv_data_path})",
    )
    parser.add_argument(
        "--function", type=str, default="sentiment",
        choices=[f.value for f in AIFunction],
    )
    parser.add_argument("--model", type=str, default=None)
    parser.add_argument("--option", action="append", default=[], help="Call option key=value")
    parser.add_argument("--param", action="append", default=[], help="Function argument key=value")
    parser.add_argument("--key-column", type=str, default="ticket_id")
    parser.add_argument("--content-column", type=str, default="content")
    parser.add_argument("--file-column", type=str, default=None)
    parser.add_argument(
        "--label-kind", type=str, default="completion", choices=sorted(STATUS_LABELS),
    )
    parser.add_argument(
        "--estimate-only", action="store_true",
        help="Only count tokens and estimate cost, don't run the function",
    )
    args = parser.parse_args()

    csv_path = Path(args.data_dir) / args.csv
    if not csv_path.is_file():
        logger.error("CSV file not found: %s", csv_path)
        sys.exit(1)

    if args.estimate_only:
        asyncio.run(estimate(csv_path, args.key_column, args.content_column, args.model))
        return

    try:
        distribution = asyncio.run(
            enrich(
                csv_path,
                AIFunction(args.function),
                model=args.model,
                options=_parse_pairs(args.option),
                params=_parse_pairs(args.param),
                key_column=args.key_column,
                content_column=args.content_column or None,
                file_column=args.file_column,
                label_kind=args.label_kind,
            )
        )
    except (InvalidCallError, ValueError) as e:
        logger.error("Invalid call: %s", e)
        sys.exit(2)

    for status, stats in distribution.items():
        print(f"{status:<10} {stats['count']:>5}  {stats['percentage']:>6.2f}%")


if __name__ == "__main__":
    main()
