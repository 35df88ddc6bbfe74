#!/usr/bin/env python3
"""
Stage 01: Module Bundling

Purpose: Run the module bundler and record which hashed file is canonical for each script.

This stage handles:
- Invoking the bundler in production or development mode
- Auditing emitted source maps (hidden in production)
- Writing the asset manifest (logical name -> hashed file) used by
  s05_references

This stage is fatal: a nonzero exit aborts the build.

Input Files
-----------
- web/index.html, web/js/**, web/src/** (bundler entry graph)

Output Files
------------
- dist/index.html (app shell, replaced by s04_entry)
- dist/js/<name>-<hash>.js, dist/js/**/*.map
- .build/asset-manifest.json

Usage
-----
    python src/pipeline.py run_stage s01_bundle
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import SOURCEMAP_EXTENSION, SOURCEMAP_MODES, BuildConfig
from toolchain import CommandRunner, SubprocessRunner, compile_modules
from stages._artifacts import AssetManifest
from stages._report_utils import StageResult


STAGE_NAME = 's01_bundle'
FATAL = True


def count_source_maps(script_dir: Path) -> int:
    """Number of source maps anywhere under the output script directory."""
    if not script_dir.is_dir():
        return 0
    return sum(1 for p in script_dir.rglob(f'*{SOURCEMAP_EXTENSION}') if p.is_file())


def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Bundle modules, then write the asset manifest for later stages."""
    runner = runner or SubprocessRunner()
    result = StageResult(STAGE_NAME, fatal=FATAL)

    print("  Bundling JavaScript...")
    print(f"  Mode: {config.mode} (source maps: {SOURCEMAP_MODES.get(config.mode, '?')})")
    print(f"  Release: {config.release}")

    outcome = compile_modules(runner, config, config.mode)
    result.metrics.add('command', outcome.command)
    result.metrics.add('mode', config.mode)

    if not outcome.ok:
        return result.fail(f"Bundler failed: {outcome.error_output()}")

    print("  JavaScript bundled")

    n_maps = count_source_maps(config.js_dist_dir)
    result.metrics.add_count('source_maps', n_maps)
    if n_maps and config.is_production:
        print(f"  {n_maps} source map(s) generated (hidden, not referenced from shipped pages)")

    manifest = AssetManifest.scan(config.js_dist_dir)
    result.metrics.add_count('hashed_scripts', len(manifest))
    try:
        manifest.save(config.asset_manifest_path)
    except OSError as e:
        result.warn(f"Could not write asset manifest, later stages will scan {config.js_dist_dir}: {e}")
    else:
        print(f"  Asset manifest: {len(manifest)} hashed script(s) -> {config.asset_manifest_path}")

    for name, files in manifest.conflicts.items():
        result.warn(
            f"{len(files)} hashed files for '{name}' ({', '.join(files)}); "
            f"using {manifest.resolve(name)}"
        )

    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
