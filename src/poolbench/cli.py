from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import os
import sys
from pathlib import Path

from poolbench.analysis import compare_pools
from poolbench.config import BenchmarkPlan, load_plan
from poolbench.loadgen.runner import ScenarioResult, run_benchmarks
from poolbench.loadgen.target import TargetBindError
from poolbench.report import format_result, results_frame

LOGGER = logging.getLogger("poolbench.cli")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="HTTP connection pool benchmark")
    parser.add_argument("--host", default=os.environ.get("POOLBENCH_HOST"))
    parser.add_argument(
        "--port",
        type=int,
        default=os.environ.get("POOLBENCH_PORT"),
        help="Target port (0 picks a free port)",
    )
    parser.add_argument(
        "--plan-path",
        default=os.environ.get("POOLBENCH_PLAN_PATH"),
        help="Optional JSON file describing a custom benchmark plan",
    )
    parser.add_argument(
        "--fail-every",
        type=int,
        default=None,
        help="Make the target answer 503 to every N-th request",
    )
    parser.add_argument("--output-csv", default=None, help="Write the summary table to this CSV file")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only print the planned scenarios without executing them",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("POOLBENCH_LOG_LEVEL", "WARNING"),
        help="Logging level",
    )
    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def apply_overrides(plan: BenchmarkPlan, args: argparse.Namespace) -> BenchmarkPlan:
    changes: dict[str, object] = {}
    if args.host:
        changes["host"] = args.host
    if args.port is not None:
        changes["port"] = args.port
    if args.fail_every is not None:
        changes["failure_every"] = args.fail_every
    if not changes:
        return plan
    return dataclasses.replace(plan, target=dataclasses.replace(plan.target, **changes))


def _print_result(result: ScenarioResult) -> None:
    print()
    print(format_result(result))


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        plan = apply_overrides(load_plan(args.plan_path), args)
        plan.validate()
    except (OSError, ValueError) as exc:
        LOGGER.error("Invalid benchmark plan: %s", exc)
        return 2

    if args.dry_run:
        print(json.dumps(plan.to_metadata(), indent=2))
        return 0

    print("Starting connection pool benchmarks...")
    try:
        results = asyncio.run(run_benchmarks(plan, reporter=_print_result))
    except TargetBindError as exc:
        LOGGER.error("Benchmark failed: %s", exc)
        return 1

    frame = results_frame(results)
    comparisons = compare_pools(frame)
    if comparisons:
        print("\n=== Candidate vs baseline ===")
        for c in comparisons:
            print(
                f"{c.kind} x{c.total}: throughput {c.throughput_delta_pct:+.2f}%, "
                f"reuse {c.reuse_delta_pts:+.2f} pts, latency {c.latency_delta_pct:+.2f}% ({c.message})"
            )
    if args.output_csv:
        output = Path(args.output_csv)
        output.parent.mkdir(parents=True, exist_ok=True)
        frame.to_csv(output, index=False)
        LOGGER.info("Summary written to %s", output)
    print("\nBenchmarks completed!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
