#!/usr/bin/env python3
"""
Tests for src/stages/s06_prune.py
"""
from __future__ import annotations

import pytest
from pathlib import Path
import sys

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / 'src'))

from stages import s06_prune


@pytest.fixture
def script_dir(build_config, write_file):
    """Output script directory with hashed and un-hashed files."""
    js = build_config.js_dist_dir
    for name in ('app.js', 'app-1a2b3c4d.js', 'app-1a2b3c4d.js.map', 'sw.js', 'constantes.js'):
        write_file(js / name, name)
    return js


class TestFindDuplicates:
    """Tests for find_duplicates()."""

    def test_pairs_unhashed_with_hashed(self, script_dir):
        """Only un-hashed files with a hashed counterpart are duplicates."""
        duplicates = s06_prune.find_duplicates(script_dir)
        assert duplicates == {script_dir / 'app.js': 'app-1a2b3c4d.js'}

    def test_hyphenated_names(self, temp_dir, write_file):
        """Hyphens in a logical name are not mistaken for a hash."""
        write_file(temp_dir / 'auth-guard.js')
        write_file(temp_dir / 'auth-guard-0a1b2c3d.js')
        assert s06_prune.find_duplicates(temp_dir) == {
            temp_dir / 'auth-guard.js': 'auth-guard-0a1b2c3d.js',
        }

    def test_subdirectories_not_scanned(self, temp_dir, write_file):
        """Files below the top level are never pruned."""
        write_file(temp_dir / 'auth' / 'auth.js')
        write_file(temp_dir / 'auth-0a1b2c3d.js')
        assert s06_prune.find_duplicates(temp_dir) == {}

    def test_missing_directory(self, temp_dir):
        """A missing script directory has no duplicates."""
        assert s06_prune.find_duplicates(temp_dir / 'missing') == {}


class TestPruneStage:
    """Tests for s06_prune.main()."""

    def test_removes_only_superseded_files(self, build_config, script_dir):
        """app.js goes; the hashed file, its map and unrelated scripts stay."""
        result = s06_prune.main(build_config)

        remaining = sorted(p.name for p in script_dir.iterdir())
        assert remaining == ['app-1a2b3c4d.js', 'app-1a2b3c4d.js.map', 'constantes.js', 'sw.js']
        assert result.metrics.get('removed_count') == 1

    def test_second_run_is_noop(self, build_config, script_dir):
        """Pruning twice removes nothing the second time."""
        s06_prune.main(build_config)
        result = s06_prune.main(build_config)
        assert result.metrics.get('removed_count') == 0

    def test_empty_output(self, build_config):
        """No script directory is not an error."""
        result = s06_prune.main(build_config)
        assert result.ok
        assert result.metrics.get('removed_count') == 0

    def test_deletion_failure_is_isolated(self, build_config, script_dir, write_file, monkeypatch):
        """A file that cannot be deleted is reported; other duplicates still go."""
        write_file(script_dir / 'login.js')
        write_file(script_dir / 'login-9f8e7d6c.js')

        real_unlink = Path.unlink

        def locked_unlink(self, *args, **kwargs):
            if self.name == 'app.js':
                raise PermissionError('file is locked')
            return real_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, 'unlink', locked_unlink)

        result = s06_prune.main(build_config)

        assert result.ok
        assert (script_dir / 'app.js').exists()
        assert not (script_dir / 'login.js').exists()
        assert result.metrics.get('removed_count') == 1
        assert len(result.warnings) == 1
        assert 'app.js' in result.warnings[0]
