#!/usr/bin/env python3
"""
Stage 03: Asset Copy

Purpose: Mirror static assets, legacy HTML pages and legacy script directories into the output tree.

This stage handles:
- The static manifest (images, API stubs, stylesheets, web manifest,
  service worker)
- Legacy standalone HTML pages
- Legacy script directories, copied recursively

Missing sources are skipped silently. A failed copy is reported as a
warning and the remaining entries still run.

Input Files
-----------
- web/images/, web/api/, web/css/fonts.css, web/css/styles.css
- web/manifest.json, web/sw.js
- web/**/*.html (legacy pages), web/js/{hero,explore,profile,favs,core,ui}/

Output Files
------------
- Same relative paths under dist/

Usage
-----
    python src/pipeline.py run_stage s03_assets
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import BuildConfig, CopyManifestEntry
from toolchain import CommandRunner
from utils.helpers import copy_path, relative_to_or_self
from stages._report_utils import StageResult


STAGE_NAME = 's03_assets'
FATAL = False


def copy_entries(
    entries: list[CopyManifestEntry],
    result: StageResult,
    root: Path,
    verbose: bool = False,
) -> int:
    """
    Copy every entry whose source exists.

    Parameters
    ----------
    entries : list[CopyManifestEntry]
        What to copy
    result : StageResult
        Receives a warning for each failed entry
    root : Path
        Source root, used to shorten paths in console output
    verbose : bool
        Print a line per copied entry

    Returns
    -------
    int
        Number of entries copied
    """
    copied = 0
    for entry in entries:
        if not entry.source.exists():
            continue
        try:
            copy_path(entry.source, entry.destination, entry.kind)
        except (OSError, ValueError) as e:
            result.warn(f"Could not copy {entry.source}: {e}")
            continue
        copied += 1
        if verbose:
            print(f"  Copied: {relative_to_or_self(entry.source, root)}")
    return copied


def legacy_page_entries(config: BuildConfig) -> list[CopyManifestEntry]:
    return [
        CopyManifestEntry(config.web_dir / page, config.dist_dir / page, 'file')
        for page in config.legacy_html_pages
    ]


def legacy_script_dir_entries(config: BuildConfig) -> list[CopyManifestEntry]:
    return [
        CopyManifestEntry(config.web_dir / d, config.dist_dir / d, 'directory')
        for d in config.legacy_script_dirs
    ]


def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Copy the static manifest, legacy pages and legacy script directories."""
    result = StageResult(STAGE_NAME, fatal=FATAL)

    print("  Copying static assets...")
    n_static = copy_entries(config.copy_manifest(), result, config.web_dir)

    print("  Copying legacy HTML pages...")
    n_pages = copy_entries(legacy_page_entries(config), result, config.web_dir, verbose=True)

    print("  Copying legacy script directories...")
    n_dirs = copy_entries(legacy_script_dir_entries(config), result, config.web_dir, verbose=True)

    result.metrics.add_count('static_assets', n_static)
    result.metrics.add_count('legacy_pages', n_pages)
    result.metrics.add_count('legacy_script_dirs', n_dirs)

    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
