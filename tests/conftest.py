#!/usr/bin/env python3
"""
Shared pytest fixtures for the test suite.

This module provides common fixtures used across test modules including:
- Temporary project trees (web/ source, dist/ output)
- A BuildConfig pointing at the temporary tree
- A fake command runner standing in for the external tools
"""
from __future__ import annotations

import sys
from pathlib import Path

# Add src directory to Python path for test imports
_project_root = Path(__file__).parent.parent
_src_path = _project_root / 'src'
if str(_src_path) not in sys.path:
    sys.path.insert(0, str(_src_path))

import pytest
import tempfile
import shutil

from config import BuildConfig
from toolchain.base import CommandResult, ToolNotFoundError


# ============================================================
# FAKE TOOLS
# ============================================================

class FakeRunner:
    """
    Command runner that records invocations and simulates the build tools.

    - ``vite`` writes ``bundle_files`` (paths relative to dist/) on success
    - ``tsc`` writes ``<outDir>/<stem>.js`` unless the stem is in
      ``failing_modules``; with ``partial_output`` a failing compile
      still leaves its output behind, as tsc does on type errors
    - ``returncodes`` forces an exit status per executable
    - executables in ``missing`` raise ToolNotFoundError
    """

    def __init__(self):
        self.calls: list[dict] = []
        self.returncodes: dict[str, int] = {}
        self.missing: set[str] = set()
        self.bundle_files: dict[str, str] = {}
        self.failing_modules: set[str] = set()
        self.partial_output = False

    def run(self, args, cwd=None, env=None, capture=False) -> CommandResult:
        args = [str(a) for a in args]
        self.calls.append({'args': args, 'cwd': cwd, 'env': env})
        tool = args[0]

        if tool in self.missing:
            raise ToolNotFoundError(f"Command not found: {tool}")

        returncode = self.returncodes.get(tool, 0)
        if returncode != 0:
            return CommandResult(args, returncode, stderr=f'{tool} failed')

        if tool == 'vite':
            self._bundle(Path(cwd) / 'dist')
        elif tool == 'tsc':
            return self._compile(args)

        return CommandResult(args, 0)

    def executables(self) -> list[str]:
        return [c['args'][0] for c in self.calls]

    def _bundle(self, dist: Path) -> None:
        for rel, content in self.bundle_files.items():
            path = dist / rel
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)

    def _compile(self, args: list[str]) -> CommandResult:
        source = Path(args[1])
        out_dir = Path(args[args.index('--outDir') + 1])
        output = out_dir / (source.stem + '.js')

        if source.stem in self.failing_modules:
            if self.partial_output:
                output.write_text('// partial\n')
            return CommandResult(args, 2, stderr=f'{source.name}: error TS2304')

        output.write_text(f'// compiled from {source.name}\n' + source.read_text())
        return CommandResult(args, 0)


# ============================================================
# PATH FIXTURES
# ============================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that is cleaned up after tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def project_tree(temp_dir):
    """Create a temporary project with an empty source tree."""
    (temp_dir / 'web').mkdir()
    return temp_dir


@pytest.fixture
def write_file():
    """Write a text file, creating parent directories."""
    def _write(path: Path, content: str = '') -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path
    return _write


# ============================================================
# CONFIGURATION FIXTURES
# ============================================================

@pytest.fixture
def build_config(project_tree) -> BuildConfig:
    """BuildConfig for the temporary project, reports disabled."""
    return BuildConfig(
        project_root=project_tree,
        web_dir=project_tree / 'web',
        dist_dir=project_tree / 'dist',
        environ={},
        reports_enabled=False,
    )


# ============================================================
# MOCK FIXTURES
# ============================================================

@pytest.fixture
def fake_runner() -> FakeRunner:
    """Fake external tools that succeed by default."""
    return FakeRunner()
