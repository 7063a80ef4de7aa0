from __future__ import annotations

from poolbench.analysis.compare import Comparison, compare_pools

__all__ = ["Comparison", "compare_pools"]
