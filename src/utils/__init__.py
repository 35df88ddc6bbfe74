"""
Utilities package.

Provides shared utilities for the build pipeline:
- helpers: File copying, directory creation and manifest loading
"""
from .helpers import copy_path, ensure_dir, load_manifest
