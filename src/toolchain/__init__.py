"""
External tool invocation.

Usage
-----
    from toolchain import SubprocessRunner, compile_modules

    result = compile_modules(SubprocessRunner(), config)
"""
from .base import CommandResult, CommandRunner, SubprocessRunner, ToolNotFoundError
from .compilers import (
    bundler_arguments,
    compile_legacy_module,
    compile_modules,
    compile_stylesheets,
)

__all__ = [
    'CommandResult',
    'CommandRunner',
    'SubprocessRunner',
    'ToolNotFoundError',
    'bundler_arguments',
    'compile_legacy_module',
    'compile_modules',
    'compile_stylesheets',
]
