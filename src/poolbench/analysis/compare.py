from __future__ import annotations

from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True, slots=True)
class Comparison:
    kind: str
    total: int
    throughput_delta_pct: float
    reuse_delta_pts: float
    latency_delta_pct: float
    message: str


def compare_pools(results: pd.DataFrame) -> list[Comparison]:
    """Pair candidate and baseline runs of the same shape and size.

    Deltas are candidate relative to baseline: positive throughput and
    negative latency deltas favour the candidate.
    """
    comparisons: list[Comparison] = []
    if results.empty:
        return comparisons
    candidate = results[results["pool"] == "candidate"]
    baseline = results[results["pool"] == "baseline"]
    if candidate.empty or baseline.empty:
        return comparisons
    keys = ["kind", "total"]
    merged = candidate.merge(baseline, on=keys, suffixes=("_cand", "_base"))
    for _, row in merged.iterrows():
        throughput_delta = _delta_pct(row["throughput_base"], row["throughput_cand"])
        latency_delta = _delta_pct(row["avg_latency_ms_base"], row["avg_latency_ms_cand"])
        reuse_delta = round(float(row["reuse_ratio_cand"] - row["reuse_ratio_base"]), 2)
        if throughput_delta >= 0:
            message = "candidate pool matched or beat baseline throughput"
        elif throughput_delta < -20:
            message = "candidate pool throughput regression detected"
        else:
            message = "candidate pool slightly slower than baseline"
        comparisons.append(
            Comparison(
                kind=str(row["kind"]),
                total=int(row["total"]),
                throughput_delta_pct=throughput_delta,
                reuse_delta_pts=reuse_delta,
                latency_delta_pct=latency_delta,
                message=message,
            )
        )
    return comparisons


def _delta_pct(base: float, candidate: float) -> float:
    if base <= 0:
        return 0.0
    return round(float((candidate - base) / base * 100), 2)
