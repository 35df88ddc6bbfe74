#!/usr/bin/env python3
"""
Stage 05: Script Reference Rewriting

Purpose: Point legacy pages' <script src> references at the bundler's hashed artifacts.

Legacy pages are copied verbatim and still reference un-hashed names such as
``login.js``. For each reference this stage finds the hashed file for the
same logical name (``login-9f8e7d6c.js``) and rewrites the attribute to
``/js/login-9f8e7d6c.js``.

References are found with a regular expression rather than a markup parser:
tags with unusual quoting or whitespace may not match. A reference without a
hashed counterpart is left as is. Pages are only written when their text
changed, and running the stage twice gives the same result as running it once.

Input Files
-----------
- dist/auth/{login,signup,verify,pin}.html, dist/event/events-result.html
- .build/asset-manifest.json (or dist/js/*.js when no manifest was written)

Output Files
------------
- The same pages, rewritten in place

Usage
-----
    python src/pipeline.py run_stage s05_references
"""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional
import re
import sys

# Add parent directory for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import SCRIPT_EXTENSION, SCRIPT_URL_PREFIX, BuildConfig
from toolchain import CommandRunner
from stages._artifacts import AssetManifest, logical_name
from stages._report_utils import StageResult


STAGE_NAME = 's05_references'
FATAL = False

SCRIPT_SRC_PATTERN = re.compile(
    r'(<script\b[^>]*?\ssrc=)(["\'])([^"\'>]+?' + re.escape(SCRIPT_EXTENSION) + r')\2',
    re.IGNORECASE,
)


# ============================================================
# REFERENCE EDITS
# ============================================================

@dataclass
class HtmlReferenceEdit:
    """One rewritten src attribute value in a page."""
    page: str
    original: str
    rewritten: str
    occurrences: int = 1


def extract_script_sources(html: str) -> list[str]:
    """Script src values ending in the script extension, in order, without repeats."""
    seen = []
    for match in SCRIPT_SRC_PATTERN.finditer(html):
        src = match.group(3)
        if src not in seen:
            seen.append(src)
    return seen


def rewrite_references(
    html: str,
    resolve: Callable[[str], Optional[str]],
    page: str = '',
    url_prefix: str = SCRIPT_URL_PREFIX,
) -> tuple[str, list[HtmlReferenceEdit]]:
    """
    Rewrite script references in ``html``.

    Only the src value of each matched <script> tag is replaced; the tag
    and attribute name keep their original spelling and quoting.

    Parameters
    ----------
    html : str
        Page text
    resolve : callable
        Maps a logical name to its hashed file name, or None
    page : str
        Page name recorded on the edits
    url_prefix : str
        URL prefix of the output script directory

    Returns
    -------
    tuple[str, list[HtmlReferenceEdit]]
        New text and the edits that changed it
    """
    edits: dict[str, HtmlReferenceEdit] = {}

    def substitute(match: re.Match) -> str:
        prefix, quote, src = match.group(1, 2, 3)
        hashed = resolve(logical_name(src))
        if hashed is None or url_prefix + hashed == src:
            return match.group(0)

        rewritten = url_prefix + hashed
        if src in edits:
            edits[src].occurrences += 1
        else:
            edits[src] = HtmlReferenceEdit(page, src, rewritten)
        return f'{prefix}{quote}{rewritten}{quote}'

    new_html = SCRIPT_SRC_PATTERN.sub(substitute, html)
    return new_html, list(edits.values())


def rewrite_page(
    page_path: Path,
    manifest: AssetManifest,
    page: str = '',
) -> list[HtmlReferenceEdit]:
    """Rewrite one page in place; the file is untouched when nothing changed."""
    html = page_path.read_text(encoding='utf-8')
    new_html, edits = rewrite_references(html, manifest.resolve, page=page or page_path.name)
    if edits and new_html != html:
        page_path.write_text(new_html, encoding='utf-8')
    return edits


# ============================================================
# MAIN
# ============================================================

def main(config: BuildConfig, runner: Optional[CommandRunner] = None) -> StageResult:
    """Rewrite script references in every configured legacy page."""
    result = StageResult(STAGE_NAME, fatal=FATAL)

    manifest = AssetManifest.for_build(config.asset_manifest_path, config.js_dist_dir)
    print(f"  Resolving references against {len(manifest)} hashed script(s)...")

    n_pages = 0
    n_edits = 0
    for page in config.rewrite_pages:
        page_path = config.dist_dir / page
        if not page_path.exists():
            continue

        try:
            edits = rewrite_page(page_path, manifest, page)
        except (OSError, UnicodeDecodeError) as e:
            result.warn(f"Could not rewrite {page}: {e}")
            continue

        if not edits:
            print(f"  No hashed scripts to point at in {page}")
            continue

        n_pages += 1
        n_edits += len(edits)
        print(f"  Updated: {page}")
        for edit in edits:
            print(f"    {edit.original} -> {edit.rewritten}")

    result.metrics.add_count('pages_updated', n_pages)
    result.metrics.add_count('references_rewritten', n_edits)
    return result


if __name__ == '__main__':
    main(BuildConfig.from_env())
