#!/usr/bin/env python3
"""
Module: pipeline.py
Purpose: Build entry point and stage runner for the Pinot PWA.

Stages run strictly in order because each one reads the output tree left by
the ones before it. Fatal stages abort the build; best-effort stages record
their problems as warnings and the build continues.

Stages
------
s00_stylesheets : Compile stylesheets (fatal)
s01_bundle : Run the module bundler, write the asset manifest (fatal)
s02_legacy_modules : Compile standalone legacy modules
s03_assets : Copy static assets, legacy pages and script directories
s04_entry : Promote the entry page to dist/index.html
s05_references : Rewrite legacy <script src> references to hashed files
s06_prune : Remove un-hashed duplicates of hashed scripts

Commands
--------
build : Run every stage (default when no command is given)
list_stages : List available stages
    Options: --prefix
run_stage : Run a single stage against the current output tree
    Options: <stage_name>

Usage
-----
    python src/pipeline.py
    NODE_ENV=development python src/pipeline.py build
    python src/pipeline.py run_stage s05_references

Notes
-----
Configuration comes from environment variables, see config.py.
Exit code is 0 on success and 1 when a fatal stage fails.
"""
from __future__ import annotations

import argparse
import importlib
import re
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent))

from config import BuildConfig, validate_config
from toolchain import CommandRunner, SubprocessRunner
from stages._report_utils import StageResult, generate_build_report, print_stage_summary


BUILD_STAGES = [
    's00_stylesheets',
    's01_bundle',
    's02_legacy_modules',
    's03_assets',
    's04_entry',
    's05_references',
    's06_prune',
]


# ============================================================
# STAGE RUNNER
# ============================================================

@dataclass
class BuildRun:
    """Results of one build, in the order the stages ran."""
    results: list[StageResult] = field(default_factory=list)
    aborted_at: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.aborted_at is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    @property
    def n_warnings(self) -> int:
        return sum(len(r.warnings) for r in self.results)


def load_stage(stage_name: str) -> ModuleType:
    """Import a stage module by name."""
    return importlib.import_module(f'stages.{stage_name}')


def stage_title(module: ModuleType) -> str:
    """First docstring line of a stage module (e.g. 'Stage 05: ...')."""
    doc = (module.__doc__ or '').strip()
    return doc.splitlines()[0] if doc else module.__name__


def execute_stage(
    module: ModuleType,
    config: BuildConfig,
    runner: CommandRunner,
) -> StageResult:
    """
    Run one stage, turning an unexpected exception into a failed result.

    Parameters
    ----------
    module : ModuleType
        Stage module exposing STAGE_NAME, FATAL and main()
    config : BuildConfig
        Build configuration
    runner : CommandRunner
        External tool runner

    Returns
    -------
    StageResult
    """
    print("=" * 60)
    print(stage_title(module))
    print("=" * 60)

    start = time.time()
    try:
        result = module.main(config, runner)
    except Exception as e:
        result = StageResult(module.STAGE_NAME, fatal=module.FATAL)
        result.fail(f"{type(e).__name__}: {e}")
    result.fatal = module.FATAL
    result.duration_seconds = time.time() - start

    if not result.ok and not result.fatal:
        result.warn(f"Stage {result.stage} failed, continuing: {result.message}")

    print()
    return result


def run_build(
    config: BuildConfig,
    runner: Optional[CommandRunner] = None,
    stages: Optional[list[str]] = None,
) -> BuildRun:
    """
    Run the build stages in order.

    Parameters
    ----------
    config : BuildConfig
        Build configuration
    runner : CommandRunner, optional
        External tool runner (default: SubprocessRunner)
    stages : list[str], optional
        Stage names to run (default: BUILD_STAGES)

    Returns
    -------
    BuildRun
        Stage results; ``aborted_at`` names the fatal stage that failed
    """
    runner = runner or SubprocessRunner()
    run = BuildRun()

    print(f"Starting Pinot PWA build ({config.mode})\n")

    for stage_name in stages or BUILD_STAGES:
        module = load_stage(stage_name)
        result = execute_stage(module, config, runner)
        run.results.append(result)

        if not result.ok and result.fatal:
            print(f"ERROR: {result.message}", file=sys.stderr)
            print(f"ERROR: Build aborted at {result.stage}", file=sys.stderr)
            run.aborted_at = result.stage
            break

    print_stage_summary(run.results)

    if config.reports_enabled:
        try:
            generate_build_report(run.results, config.reports_dir, mode=config.mode)
        except OSError as e:
            print(f"  WARNING: Could not write build report: {e}")

    if run.ok:
        print("\nBuild completed successfully!")
        print(f"Output: {config.dist_dir}")
        if run.n_warnings:
            print(f"{run.n_warnings} warning(s), see above")
        if config.is_production:
            print("Tip: for inline source maps build with NODE_ENV=development")
    else:
        print("\nBuild FAILED", file=sys.stderr)

    return run


# ============================================================
# STAGE DISCOVERY
# ============================================================

def discover_stages(prefix: str = None) -> list[tuple[str, str]]:
    """
    Discover available stage modules.

    Parameters
    ----------
    prefix : str, optional
        Filter by stage prefix (e.g., 's00', 's05')

    Returns
    -------
    list[tuple[str, str]]
        List of (stage_name, description) tuples
    """
    stages_dir = Path(__file__).parent / 'stages'
    stages = []

    for f in sorted(stages_dir.glob('s*.py')):
        name = f.stem
        if prefix and not name.startswith(prefix):
            continue

        match = re.search(r'Purpose:\s*(.+?)(?:\n|$)', f.read_text())
        desc = match.group(1).strip() if match else ''

        stages.append((name, desc))

    return stages


def list_available_stages(prefix: str = None) -> None:
    """List available stage modules."""
    print("Available Build Stages")
    print("=" * 60)

    stages = discover_stages(prefix)

    if not stages:
        if prefix:
            print(f"No stages found with prefix '{prefix}'")
        else:
            print("No stages found")
        return

    for name, desc in stages:
        print(f"  {name:<22} {desc}")

    print()
    print(f"Total: {len(stages)} stage(s)")
    print()
    print("Run a stage with: python src/pipeline.py run_stage <stage_name>")


def run_stage_by_name(
    stage_name: str,
    config: BuildConfig,
    runner: Optional[CommandRunner] = None,
) -> int:
    """
    Run a single stage by its module name.

    Returns
    -------
    int
        Process exit code
    """
    known = [name for name, _ in discover_stages()]
    if stage_name not in known:
        print(f"ERROR: Stage '{stage_name}' not found", file=sys.stderr)
        print("Available stages:")
        for name in known:
            print(f"  - {name}")
        return 1

    result = execute_stage(load_stage(stage_name), config, runner or SubprocessRunner())
    print_stage_summary([result])
    if not result.ok and result.fatal:
        print(f"ERROR: {result.message}", file=sys.stderr)
        return 1
    return 0


# ============================================================
# CLI
# ============================================================

def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(
        description='Pinot PWA build',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )
    sub = p.add_subparsers(dest='cmd')

    sub.add_parser('build', help='Run every build stage')

    p_list_stages = sub.add_parser('list_stages', help='List available stages')
    p_list_stages.add_argument(
        '--prefix', '-p',
        default=None,
        help='Filter by stage prefix (e.g., s00, s05)'
    )

    p_run_stage = sub.add_parser('run_stage', help='Run a single stage by name')
    p_run_stage.add_argument(
        'stage_name',
        help='Stage name (e.g., s05_references)'
    )

    return p.parse_args(argv)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    if args.cmd == 'list_stages':
        list_available_stages(args.prefix)
        return 0

    try:
        config = BuildConfig.from_env()
        validate_config(config)
    except (ValueError, FileNotFoundError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.cmd == 'run_stage':
        return run_stage_by_name(args.stage_name, config)

    return run_build(config).exit_code


if __name__ == '__main__':
    sys.exit(main())
