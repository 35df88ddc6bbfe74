"""
Stylesheet, Bundler and Legacy Module Compiler Invocations.

Each function builds the command line for one external tool from the build
configuration and runs it through a ``CommandRunner``. Success or failure is
returned as a ``CommandResult``; deciding whether a failure is fatal is left
to the calling stage.

Usage
-----
    from toolchain import SubprocessRunner, compile_stylesheets, compile_modules

    runner = SubprocessRunner()
    result = compile_stylesheets(runner, config)
    result = compile_modules(runner, config, mode='production')
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

sys.path.insert(0, str(Path(__file__).parent.parent))

from config import (
    BUILD_MODES,
    MODULE_COMPILER_OPTIONS,
    SOURCEMAP_MODES,
    BuildConfig,
)
from toolchain.base import CommandResult, CommandRunner


def compile_stylesheets(runner: CommandRunner, config: BuildConfig) -> CommandResult:
    """Run the stylesheet compiler in the project root."""
    return runner.run(
        config.stylesheet_command,
        cwd=config.project_root,
        env=config.tool_environment(),
        capture=True,
    )


def bundler_arguments(config: BuildConfig, mode: str) -> list[str]:
    """Bundler command line for ``mode``."""
    return [*config.bundler_command, '--mode', mode, '--sourcemap', SOURCEMAP_MODES[mode]]


def compile_modules(
    runner: CommandRunner,
    config: BuildConfig,
    mode: Optional[str] = None,
) -> CommandResult:
    """
    Run the module bundler.

    Parameters
    ----------
    runner : CommandRunner
        How to invoke the tool
    config : BuildConfig
        Build configuration
    mode : str, optional
        'production' or 'development' (default: ``config.mode``).
        Production emits source maps as separate hidden files,
        development inlines them.

    Returns
    -------
    CommandResult
    """
    mode = mode or config.mode
    if mode not in BUILD_MODES:
        raise ValueError(f"Unknown build mode '{mode}'. Available: {', '.join(BUILD_MODES)}")

    env = config.tool_environment()
    env['NODE_ENV'] = mode

    return runner.run(
        bundler_arguments(config, mode),
        cwd=config.project_root,
        env=env,
        capture=True,
    )


def compile_legacy_module(
    runner: CommandRunner,
    config: BuildConfig,
    source: Path,
    out_dir: Path,
) -> CommandResult:
    """
    Compile a single standalone module into ``out_dir``.

    The compiler writes ``<out_dir>/<source stem>.js``.
    """
    args = [
        config.module_compiler,
        str(source),
        *MODULE_COMPILER_OPTIONS,
        '--outDir', str(out_dir),
        '--rootDir', str(source.parent),
    ]
    return runner.run(
        args,
        cwd=config.project_root,
        env=config.tool_environment(),
        capture=True,
    )
