"""
Build stages package.

Each stage module follows a consistent pattern:
- Docstring with Input/Output files documented
- STAGE_NAME and FATAL constants
- main(config, runner=None) entry point returning a StageResult
"""
