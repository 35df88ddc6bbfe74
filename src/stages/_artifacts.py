#!/usr/bin/env python3
"""
Script Artifact Naming and the Asset Manifest.

Bundler output follows ``<logical>-<hash>.js`` where ``hash`` is lowercase hex
of at least HASH_MIN_LENGTH characters. Everything else ending in ``.js`` is
un-hashed. Source maps are never artifacts.

The ``AssetManifest`` records one canonical hashed file per logical name. It
is written right after the bundler runs so later stages do not depend on
directory listing order when stale hashed files are left alongside new ones.

Usage
-----
    from stages._artifacts import AssetManifest, logical_name

    manifest = AssetManifest.scan(config.js_dist_dir)
    manifest.save(config.asset_manifest_path)

    hashed = manifest.resolve(logical_name('login.js'))  # 'login-9f8e7d6c.js'
"""
from __future__ import annotations

import json
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import HASH_MIN_LENGTH, SCRIPT_EXTENSION, SOURCEMAP_EXTENSION


HASH_SUFFIX = re.compile(rf'-[a-f0-9]{{{HASH_MIN_LENGTH},}}$')


# ============================================================
# NAME PARSING
# ============================================================

def is_script(filename: str) -> bool:
    """True for script files, excluding source maps."""
    return filename.endswith(SCRIPT_EXTENSION) and not filename.endswith(SOURCEMAP_EXTENSION)


def strip_extension(filename: str) -> str:
    if filename.endswith(SCRIPT_EXTENSION):
        return filename[:-len(SCRIPT_EXTENSION)]
    return filename


def is_hashed(filename: str) -> bool:
    """True for ``<logical>-<hex>.js`` names."""
    return is_script(filename) and bool(HASH_SUFFIX.search(strip_extension(filename)))


def logical_name(reference: str) -> str:
    """
    Stable name of a script reference or file name.

    Directories, query strings, the extension and any hash suffix are dropped:
    ``/js/login-9f8e7d6c.js?v=2`` and ``login.js`` both give ``login``.
    """
    name = reference.split('?', 1)[0].split('#', 1)[0]
    name = name.rstrip('/').rsplit('/', 1)[-1]
    return HASH_SUFFIX.sub('', strip_extension(name))


def list_scripts(script_dir: Path) -> list[Path]:
    """Script files directly inside ``script_dir``, sorted by name."""
    if not script_dir.is_dir():
        return []
    return sorted(
        (p for p in script_dir.iterdir() if p.is_file() and is_script(p.name)),
        key=lambda p: p.name,
    )


# ============================================================
# ASSET MANIFEST
# ============================================================

@dataclass
class AssetManifest:
    """Logical name -> canonical hashed file name for one output script dir."""
    entries: dict[str, str] = field(default_factory=dict)
    # Logical names for which more than one hashed file was seen
    conflicts: dict[str, list[str]] = field(default_factory=dict)

    def resolve(self, name: str) -> Optional[str]:
        return self.entries.get(name)

    def __len__(self) -> int:
        return len(self.entries)

    @classmethod
    def scan(cls, script_dir: Path) -> 'AssetManifest':
        """
        Build the manifest from the files currently in ``script_dir``.

        When several hashed files share a logical name, the most recently
        modified wins; equal times fall back to the greatest file name.
        """
        candidates: dict[str, list[Path]] = {}
        for path in list_scripts(script_dir):
            if is_hashed(path.name):
                candidates.setdefault(logical_name(path.name), []).append(path)

        manifest = cls()
        for name, paths in sorted(candidates.items()):
            best = max(paths, key=lambda p: (p.stat().st_mtime, p.name))
            manifest.entries[name] = best.name
            if len(paths) > 1:
                manifest.conflicts[name] = sorted(p.name for p in paths)
        return manifest

    def save(self, path: Path) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = {'scripts': self.entries, 'conflicts': self.conflicts}
        with open(path, 'w') as f:
            json.dump(payload, f, indent=2, sort_keys=True)
        return path

    @classmethod
    def load(cls, path: Path) -> Optional['AssetManifest']:
        """Read a saved manifest, or None when there is none."""
        if not path.exists():
            return None
        with open(path) as f:
            payload = json.load(f)
        return cls(
            entries=dict(payload.get('scripts', {})),
            conflicts={k: list(v) for k, v in payload.get('conflicts', {}).items()},
        )

    @classmethod
    def for_build(cls, manifest_path: Path, script_dir: Path) -> 'AssetManifest':
        """
        Manifest written by the bundler stage, dropping entries whose file has
        since disappeared; scans ``script_dir`` when no manifest was written.
        """
        manifest = cls.load(manifest_path)
        if manifest is None:
            return cls.scan(script_dir)
        manifest.entries = {
            name: filename
            for name, filename in manifest.entries.items()
            if (script_dir / filename).is_file()
        }
        return manifest
