"""
protometta Evaluation Metrics

Records per-run evaluation statistics for the integration layer:
- Code size and number of results per run
- Error atoms produced
- Wall-clock evaluation time
"""

import json
import time
from dataclasses import dataclass, asdict
from typing import Any, Dict, List, Sequence

import numpy as np

from .core import Atom, Error


@dataclass
class EvaluationRecord:
    """Statistics for a single run/eval call."""
    timestamp: float
    code_length: int
    num_results: int
    num_errors: int
    elapsed: float


class MetricsTracker:
    """
    Collects EvaluationRecords and summarizes them.

    Only the most recent ``max_records`` runs are kept.
    """

    def __init__(self, max_records: int = 1000):
        self.max_records = max_records
        self.records: List[EvaluationRecord] = []

    def record(self, code: str, results: Sequence[Atom], elapsed: float) -> EvaluationRecord:
        entry = EvaluationRecord(
            timestamp=time.time(),
            code_length=len(code),
            num_results=len(results),
            num_errors=sum(1 for r in results if isinstance(r, Error)),
            elapsed=elapsed,
        )
        self.records.append(entry)
        if len(self.records) > self.max_records:
            self.records = self.records[-self.max_records:]
        return entry

    def summary(self) -> Dict[str, Any]:
        """
        Aggregate the recorded runs.

        Returns:
            Dictionary with run count, elapsed time statistics (mean, std, max),
            mean results per run and total error atoms
        """
        if not self.records:
            return {
                'runs': 0,
                'mean_elapsed': 0.0,
                'std_elapsed': 0.0,
                'max_elapsed': 0.0,
                'mean_results': 0.0,
                'total_errors': 0,
            }

        elapsed = np.array([r.elapsed for r in self.records], dtype=float)
        results = np.array([r.num_results for r in self.records], dtype=float)
        return {
            'runs': len(self.records),
            'mean_elapsed': float(np.mean(elapsed)),
            'std_elapsed': float(np.std(elapsed)),
            'max_elapsed': float(np.max(elapsed)),
            'mean_results': float(np.mean(results)),
            'total_errors': int(sum(r.num_errors for r in self.records)),
        }

    def to_json(self) -> str:
        return json.dumps({
            'summary': self.summary(),
            'records': [asdict(r) for r in self.records],
        }, indent=2)

    def reset(self):
        self.records = []
