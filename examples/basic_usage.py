#!/usr/bin/env python3
"""
Basic prmetrics usage example.

Searches pull requests, prints a summary and a developer scorecard.
Run with: GITHUB_TOKEN=... python examples/basic_usage.py [query]
"""

import asyncio
import logging
import sys

from prmetrics import (
    AsyncGitHubClient,
    ConfigurationError,
    MetricsPipeline,
    PRMetricsError,
    SearchOptions,
    ValidationError,
    build_query,
    configure_logging,
    parse_query,
    summarize,
    validate_query,
)


async def main(query: str) -> int:
    print("=== prmetrics Basic Usage Example ===\n")

    # 1. Query language
    print("1. Parsing and rebuilding the query...")
    filters = parse_query(query)
    print(f"   Authors: {filters.authors}, state: {filters.state}")
    print(f"   Canonical: {build_query(filters)}")
    result = validate_query(query)
    for warning in result.warnings:
        print(f"   Warning: {warning}")

    # 2. Search and summarize
    print("\n2. Searching pull requests...")
    try:
        client = AsyncGitHubClient.from_env()
    except ConfigurationError as e:
        print(f"   {e.message}")
        return 1

    async with client:
        pipeline = MetricsPipeline(client)
        try:
            page = await pipeline.search_pull_requests(query, SearchOptions(per_page=25))
        except ValidationError as e:
            print(f"   Invalid query: {'; '.join(e.errors)}")
            return 1
        except PRMetricsError as e:
            print(f"   GitHub request failed: {e.message}")
            return 1

        print(f"   {page.total_count} matches, {len(page.items)} loaded")
        summary = summarize(page.items)
        if summary is None:
            print("   Nothing to summarize")
            return 0

        print(f"   Merged: {summary.merged}, open: {summary.open}, stale: {summary.stale_open}")
        print(f"   Median lead time: {summary.median_lead_time_h} h")
        print(f"   Median time to first review: {summary.median_review_h} h")

        # 3. Developer scorecard for the first author
        author = page.items[0].author
        print(f"\n3. Scorecard for {author}...")
        metrics = await pipeline.developer_metrics(author)
        scores = metrics.scores
        print(f"   Merge success: {scores.merge_success}/10 ({scores.merge_rate:.0%} merged)")
        print(f"   Size efficiency: {scores.size_efficiency}/10 (median {scores.median_size} lines)")
        print(f"   Review activity: {scores.review_activity}/10")

    print("\n=== Done ===")
    return 0


if __name__ == "__main__":
    configure_logging(level=logging.WARNING)
    query = sys.argv[1] if len(sys.argv) > 1 else "author:octocat is:merged"
    sys.exit(asyncio.run(main(query)))
