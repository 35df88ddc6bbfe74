#!/usr/bin/env python3
"""
Stage 00: Stylesheet Compilation

Purpose: Compile stylesheets with the external stylesheet compiler.

This stage is fatal: a nonzero exit aborts the build before the bundler runs.

Input Files
-----------
- web/css/*.css, tailwind configuration

Output Files
------------
- web/css/styles.css (copied to dist/ by s03_assets)

Usage
-----
    python src/pipeline.py run_stage s00_stylesheets
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import BuildConfig
from toolchain import CommandRunner, SubprocessRunner, compile_stylesheets
from stages._report_utils import StageResult


STAGE_NAME = 's00_stylesheets'
FATAL = True


def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Compile stylesheets; the result is not ok when the compiler fails."""
    runner = runner or SubprocessRunner()
    result = StageResult(STAGE_NAME, fatal=FATAL)

    print("  Compiling CSS...")
    outcome = compile_stylesheets(runner, config)
    result.metrics.add('command', outcome.command)

    if not outcome.ok:
        return result.fail(f"Stylesheet compilation failed: {outcome.error_output()}")

    print("  CSS compiled")
    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
