#!/usr/bin/env python3
"""
Stage 02: Legacy Module Compilation

Purpose: Compile standalone modules that legacy pages load directly.

These modules are outside the bundler's entry graph, so each one is compiled
on its own to plain script output that runs without a module-resolution
runtime in the browser.

This stage handles:
- Skipping modules whose source does not exist (legacy files are optional)
- Compiling each module into its destination directory and renaming the
  output to the destination name when they differ
- Falling back to a copy of the original source when compilation fails

Input Files
-----------
- web/js/auth/auth.ts, web/js/auth/auth-guard.ts, web/js/auth/verify.ts
- web/js/constantes.ts

Output Files
------------
- dist/js/auth/*.js, dist/js/constantes.js
- OR dist/js/**/<name>.ts (uncompiled fallback)

Usage
-----
    python src/pipeline.py run_stage s02_legacy_modules
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import shutil
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import SCRIPT_EXTENSION, BuildConfig, CompiledModuleSpec
from toolchain import CommandRunner, SubprocessRunner, compile_legacy_module
from utils.helpers import ensure_dir
from stages._report_utils import StageResult


STAGE_NAME = 's02_legacy_modules'
FATAL = False


# ============================================================
# COMPILATION
# ============================================================

def expected_output(spec: CompiledModuleSpec) -> Path:
    """Where the compiler writes its output for ``spec``."""
    return spec.destination.parent / (spec.source.stem + SCRIPT_EXTENSION)


def fallback_path(spec: CompiledModuleSpec) -> Path:
    """Destination with the source's extension, for the uncompiled copy."""
    return spec.destination.with_suffix(spec.source.suffix)


def compile_module(
    spec: CompiledModuleSpec,
    config: BuildConfig,
    runner: CommandRunner,
) -> Optional[str]:
    """
    Compile one module to ``spec.destination``.

    Returns
    -------
    str or None
        None on success, otherwise the reason compilation failed
    """
    out_dir = ensure_dir(spec.destination.parent)
    outcome = compile_legacy_module(runner, config, spec.source, out_dir)
    if not outcome.ok:
        return outcome.error_output()

    compiled = expected_output(spec)
    if not compiled.exists():
        return f"compiler produced no {compiled.name}"

    if compiled != spec.destination:
        compiled.replace(spec.destination)

    # Source copy left by an earlier failed build
    fallback = fallback_path(spec)
    if fallback != spec.destination and fallback.exists():
        fallback.unlink()
    return None


def fall_back_to_source(spec: CompiledModuleSpec) -> Path:
    """Drop any partial compiled output and copy the original source instead."""
    for stale in (expected_output(spec), spec.destination):
        if stale.exists() and stale != fallback_path(spec):
            stale.unlink()

    target = fallback_path(spec)
    ensure_dir(target.parent)
    shutil.copyfile(spec.source, target)
    return target


# ============================================================
# MAIN
# ============================================================

def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Compile every legacy module, degrading to source copies on failure."""
    runner = runner or SubprocessRunner()
    result = StageResult(STAGE_NAME, fatal=FATAL)

    specs = config.compiled_modules()
    print(f"  Compiling {len(specs)} legacy module(s)...")

    compiled = 0
    fallbacks = 0
    skipped = 0

    for spec in specs:
        if not spec.source.exists():
            skipped += 1
            continue

        try:
            error = compile_module(spec, config, runner)
        except (RuntimeError, OSError) as e:
            error = str(e)

        if error is None:
            compiled += 1
            print(f"  Compiled: {spec.source.name} -> {spec.destination.name}")
            continue

        try:
            target = fall_back_to_source(spec)
        except OSError as e:
            result.warn(f"Could not compile or copy {spec.source}: {e}")
            continue

        fallbacks += 1
        result.warn(f"Failed to compile {spec.source.name}, copied as is to {target.name} ({error})")

    result.metrics.add_count('compiled', compiled)
    result.metrics.add_count('fallback', fallbacks)
    result.metrics.add_count('skipped', skipped)

    if compiled:
        print(f"  {compiled} module(s) compiled")
    else:
        result.warn("No legacy modules were compiled")

    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
