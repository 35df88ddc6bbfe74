#!/usr/bin/env python3
"""
Stage 06: Duplicate Pruning

Purpose: Remove un-hashed scripts that have a hashed counterpart in the output script directory.

Un-hashed files without a hashed counterpart stay: they are legacy compiled
output or assets kept un-hashed on purpose (the service worker).

Input Files
-----------
- dist/js/*.js

Output Files
------------
- dist/js/*.js, minus superseded un-hashed duplicates

Usage
-----
    python src/pipeline.py run_stage s06_prune
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import BuildConfig
from toolchain import CommandRunner
from stages._artifacts import is_hashed, list_scripts, logical_name
from stages._report_utils import StageResult


STAGE_NAME = 's06_prune'
FATAL = False


def find_duplicates(script_dir: Path) -> dict[Path, str]:
    """
    Un-hashed scripts superseded by a hashed file.

    Returns
    -------
    dict[Path, str]
        Un-hashed path -> name of one hashed counterpart
    """
    hashed: dict[str, str] = {}
    unhashed: list[Path] = []

    for path in list_scripts(script_dir):
        if is_hashed(path.name):
            hashed.setdefault(logical_name(path.name), path.name)
        else:
            unhashed.append(path)

    return {
        path: hashed[logical_name(path.name)]
        for path in unhashed
        if logical_name(path.name) in hashed
    }


def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Delete superseded un-hashed scripts."""
    result = StageResult(STAGE_NAME, fatal=FATAL)

    removed = 0
    for path, counterpart in find_duplicates(config.js_dist_dir).items():
        try:
            path.unlink()
        except OSError as e:
            result.warn(f"Could not remove {path.name}: {e}")
            continue
        removed += 1
        print(f"  Removed: {path.name} (compiled version exists: {counterpart})")

    result.metrics.add_count('removed', removed)
    if removed:
        print(f"  {removed} duplicate file(s) removed")
    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
