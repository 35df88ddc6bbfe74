#!/usr/bin/env python3
"""
Stage Results and Build Reports.

Every stage returns a ``StageResult``. Recoverable problems are recorded on
it as warnings (and printed inline as they happen); stage-specific counts go
into its ``BuildMetrics``. At the end of a run the results can be written as
a CSV report.

Usage
-----
    from stages._report_utils import StageResult, generate_build_report

    result = StageResult('s03_assets')
    result.warn(f"Could not copy {path}: {e}")
    result.metrics.add_count('copied', 12)

    generate_build_report(results, mode='production')
"""
from __future__ import annotations

import sys
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

# Add parent for config import
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import BUILD_REPORTS_DIR


class BuildMetrics:
    """
    Container for metrics collected during a build stage.

    Examples
    --------
    >>> metrics = BuildMetrics()
    >>> metrics.add('mode', 'production')
    >>> metrics.add_count('copied', 4)
    >>> metrics.to_dict()
    {'mode': 'production', 'copied_count': 4}
    """

    def __init__(self):
        self._metrics: dict[str, Any] = {}

    def add(self, name: str, value: Any) -> 'BuildMetrics':
        """Add a metric."""
        self._metrics[name] = value
        return self

    def add_count(self, name: str, value: int) -> 'BuildMetrics':
        """Add a count metric (appends '_count' to name)."""
        self._metrics[f'{name}_count'] = value
        return self

    def get(self, name: str, default: Any = None) -> Any:
        return self._metrics.get(name, default)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return self._metrics.copy()

    def __len__(self) -> int:
        return len(self._metrics)

    def __repr__(self) -> str:
        return f"BuildMetrics({self._metrics})"


@dataclass
class StageResult:
    """
    Outcome of one pipeline stage.

    Attributes
    ----------
    stage : str
        Stage module name (e.g., 's03_assets')
    ok : bool
        False when the stage failed as a whole
    message : str, optional
        Failure reason or short outcome description
    warnings : list[str]
        Recoverable problems met while running
    metrics : BuildMetrics
        Stage-specific counts
    fatal : bool
        Whether a failure of this stage aborts the build
    duration_seconds : float
        Wall time, filled in by the stage runner
    """

    stage: str
    ok: bool = True
    message: Optional[str] = None
    warnings: list[str] = field(default_factory=list)
    metrics: BuildMetrics = field(default_factory=BuildMetrics)
    fatal: bool = False
    duration_seconds: float = 0.0

    def warn(self, message: str) -> None:
        """Record a recoverable problem and show it to the operator."""
        print(f"  WARNING: {message}")
        self.warnings.append(message)

    def fail(self, message: str) -> 'StageResult':
        """Mark the whole stage as failed."""
        self.ok = False
        self.message = message
        return self

    @property
    def status(self) -> str:
        if not self.ok:
            return 'FAILED'
        return 'WARN' if self.warnings else 'OK'


def print_stage_summary(results: list[StageResult]) -> None:
    """Print one line per stage and every warning raised during the run."""
    print("\nBuild Summary")
    print("-" * 60)
    for r in results:
        print(f"  [{r.status:<6}] {r.stage:<24} {r.duration_seconds:6.2f}s"
              + (f"  {r.message}" if r.message else ''))

    warnings = [(r.stage, w) for r in results for w in r.warnings]
    if warnings:
        print(f"\n  {len(warnings)} warning(s):")
        for stage, warning in warnings:
            print(f"    {stage}: {warning}")


def generate_build_report(
    results: list[StageResult],
    output_dir: Optional[Path] = None,
    mode: str = '',
    include_timestamp: bool = True,
) -> Optional[Path]:
    """
    Write a CSV report of a build run.

    Parameters
    ----------
    results : list[StageResult]
        Results of the stages that ran, in order
    output_dir : Path, optional
        Output directory (default: BUILD_REPORTS_DIR from config)
    mode : str
        Build mode, recorded on every row
    include_timestamp : bool
        Whether to include timestamp in filename (default: True)

    Returns
    -------
    Path or None
        Path to generated report, or None when there is nothing to report
    """
    if not results:
        return None

    if output_dir is None:
        output_dir = BUILD_REPORTS_DIR

    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    if include_timestamp:
        filename = f'build_{timestamp}.csv'
    else:
        filename = 'build.csv'

    report_path = output_dir / filename

    rows = []
    for r in results:
        values: dict[str, Union[str, int, float, bool]] = {
            'status': r.status,
            'fatal': r.fatal,
            'warnings_count': len(r.warnings),
            'duration_seconds': round(r.duration_seconds, 3),
        }
        if r.message:
            values['message'] = r.message
        values.update(r.metrics.to_dict())
        rows.extend(
            {
                'stage': r.stage,
                'metric': key,
                'value': value,
                'mode': mode,
                'timestamp': timestamp,
            }
            for key, value in values.items()
        )

    df = pd.DataFrame(rows, columns=['stage', 'metric', 'value', 'mode', 'timestamp'])
    df.to_csv(report_path, index=False)

    print(f"Build report saved: {report_path}")
    return report_path
