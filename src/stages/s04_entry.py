#!/usr/bin/env python3
"""
Stage 04: Entry Page Promotion

Purpose: Serve the legacy entry page as the site's default document.

The bundler writes its own app-shell root document; when the entry page was
copied into the output tree it overwrites that document. Must run after
s01_bundle and s03_assets.

Input Files
-----------
- dist/hero.html

Output Files
------------
- dist/index.html

Usage
-----
    python src/pipeline.py run_stage s04_entry
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional
import shutil
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import ROOT_DOCUMENT, BuildConfig
from toolchain import CommandRunner
from stages._report_utils import StageResult


STAGE_NAME = 's04_entry'
FATAL = False


def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Copy the entry page over the root document if it was built."""
    result = StageResult(STAGE_NAME, fatal=FATAL)

    entry = config.dist_dir / config.entry_page
    root_document = config.dist_dir / ROOT_DOCUMENT

    if not entry.exists():
        result.metrics.add('promoted', False)
        print(f"  {config.entry_page} not in output, keeping bundler {ROOT_DOCUMENT}")
        return result

    try:
        shutil.copyfile(entry, root_document)
    except OSError as e:
        result.warn(f"Could not copy {config.entry_page} to {ROOT_DOCUMENT}: {e}")
        result.metrics.add('promoted', False)
        return result

    result.metrics.add('promoted', True)
    print(f"  {config.entry_page} copied as {ROOT_DOCUMENT} (default page)")
    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
