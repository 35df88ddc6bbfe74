#!/usr/bin/env python3
"""
Common utility functions for the build pipeline.

This module provides shared helper functions used across multiple stages.
"""
from __future__ import annotations

import shutil
from pathlib import Path
from typing import Union


# Manifest keys a YAML override file may set
MANIFEST_LIST_KEYS = (
    'legacy_html_pages',
    'legacy_script_dirs',
    'rewrite_pages',
)
MANIFEST_PAIR_KEYS = (
    'static_assets',
    'legacy_modules',
)


def ensure_dir(path: Path) -> Path:
    """Ensure a directory exists, creating it if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def copy_path(source: Path, destination: Path, kind: str = None) -> str:
    """
    Copy a file or directory, creating parents and overwriting the destination.

    Parameters
    ----------
    source : Path
        File or directory to copy
    destination : Path
        Target path
    kind : str, optional
        'file' or 'directory'. Inferred from ``source`` when omitted.

    Returns
    -------
    str
        The kind of copy performed

    Raises
    ------
    OSError
        If the copy fails
    """
    if kind is None:
        kind = 'directory' if source.is_dir() else 'file'

    if kind == 'directory':
        shutil.copytree(source, destination, dirs_exist_ok=True)
    elif kind == 'file':
        ensure_dir(destination.parent)
        shutil.copyfile(source, destination)
    else:
        raise ValueError(f"Unknown copy kind '{kind}' for {source}")

    return kind


def relative_to_or_self(path: Path, root: Path) -> str:
    """Render ``path`` relative to ``root`` when possible (for console output)."""
    try:
        return str(path.relative_to(root))
    except ValueError:
        return str(path)


def _as_pair(item: Union[dict, list, tuple], key: str) -> tuple[str, str]:
    if isinstance(item, dict):
        try:
            return str(item['source']), str(item['destination'])
        except KeyError as e:
            raise ValueError(f"'{key}' entry missing {e}: {item}")
    if isinstance(item, (list, tuple)) and len(item) == 2:
        return str(item[0]), str(item[1])
    raise ValueError(f"'{key}' entries must be source/destination pairs: {item!r}")


def load_manifest(manifest_path: Path) -> dict:
    """
    Load a YAML manifest override file.

    Parameters
    ----------
    manifest_path : Path
        YAML file whose top-level keys override the fixed manifests
        (static_assets, legacy_modules, legacy_html_pages,
        legacy_script_dirs, rewrite_pages, entry_page)

    Returns
    -------
    dict
        Overrides ready to apply to a ``BuildConfig``

    Raises
    ------
    FileNotFoundError
        If the file does not exist
    ValueError
        If the file holds unknown keys or malformed entries
    """
    import yaml

    if not manifest_path.exists():
        raise FileNotFoundError(f"Build manifest not found: {manifest_path}")
    with open(manifest_path) as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ValueError(f"Build manifest must be a mapping: {manifest_path}")

    known = set(MANIFEST_LIST_KEYS) | set(MANIFEST_PAIR_KEYS) | {'entry_page'}
    unknown = sorted(set(raw) - known)
    if unknown:
        raise ValueError(f"Unknown build manifest keys: {', '.join(unknown)}")

    overrides = {}
    for key in MANIFEST_LIST_KEYS:
        if key in raw:
            overrides[key] = [str(item) for item in raw[key] or []]
    for key in MANIFEST_PAIR_KEYS:
        if key in raw:
            overrides[key] = [_as_pair(item, key) for item in raw[key] or []]
    if 'entry_page' in raw:
        overrides['entry_page'] = str(raw['entry_page'])

    return overrides
