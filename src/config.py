#!/usr/bin/env python3
"""
Configuration constants for the Pinot PWA build.

This module centralizes paths, the fixed asset manifests, external tool
commands and naming conventions. Anything read from the process environment
is collected once into a ``BuildConfig`` and passed to every stage.

Usage
-----
    from config import BuildConfig, validate_config

    config = BuildConfig.from_env()
    validate_config(config)

    # Or import specific sections
    from config import (
        # Paths
        PROJECT_ROOT,
        WEB_DIR,
        DIST_DIR,

        # Manifests
        STATIC_ASSETS,
        LEGACY_HTML_PAGES,
        LEGACY_MODULES,

        # Tools
        STYLESHEET_COMMAND,
        BUNDLER_COMMAND,
    )

Environment Variables
---------------------
NODE_ENV : str
    Build mode, 'production' (default) or 'development'.
SENTRY_RELEASE : str
    Release tag forwarded to the bundler. Falls back to
    ``pinot-frontend@<npm_package_version>``.
PINOT_TELEMETRY_DISABLED : str
    Any truthy value disables tool telemetry (default: disabled).
EMAIL_USER, EMAIL_PASSWORD, EMAIL_HOST, EMAIL_PORT, EMAIL_FROM : str
    Mail credentials for the functions deploy. Forwarded to the tools as
    part of the environment snapshot, never read or printed here.
PINOT_BUILD_MANIFEST : str
    Optional YAML file overriding the fixed manifests.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping, Optional


# =============================================================================
# PATHS
# =============================================================================

def _find_project_root() -> Path:
    """Find project root by looking for characteristic directories."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / 'src').exists() and (parent / 'web').exists():
            return parent
    # Fallback: use parent of src/
    return Path(__file__).resolve().parent.parent


PROJECT_ROOT = _find_project_root()

# Source tree
WEB_DIR = PROJECT_ROOT / 'web'

# Output tree
DIST_DIR = PROJECT_ROOT / 'dist'
JS_DIST_DIR = DIST_DIR / 'js'

# Build bookkeeping (never served)
BUILD_STATE_DIR = PROJECT_ROOT / '.build'
ASSET_MANIFEST_PATH = BUILD_STATE_DIR / 'asset-manifest.json'


# =============================================================================
# BUILD MODES
# =============================================================================

PRODUCTION = 'production'
DEVELOPMENT = 'development'

BUILD_MODES = (PRODUCTION, DEVELOPMENT)

DEFAULT_MODE = PRODUCTION

# Source map handling per mode: hidden maps are emitted but not referenced
SOURCEMAP_MODES = {
    PRODUCTION: 'hidden',
    DEVELOPMENT: 'inline',
}


# =============================================================================
# EXTERNAL TOOLS
# =============================================================================

# Tailwind compile, leaves CSS at web/css/styles.css
STYLESHEET_COMMAND = ['pnpm', 'run', 'build:css']

# Vite build, emits content-hashed files into dist/
BUNDLER_COMMAND = ['vite', 'build']

# Per-file TypeScript compiler for legacy modules
MODULE_COMPILER = 'tsc'
MODULE_COMPILER_OPTIONS = [
    '--target', 'ES2022',
    '--module', 'ESNext',
    '--moduleResolution', 'bundler',
    '--esModuleInterop',
    '--allowSyntheticDefaultImports',
    '--skipLibCheck',
]


# =============================================================================
# FILE NAMING CONVENTIONS
# =============================================================================

SCRIPT_EXTENSION = '.js'
SOURCEMAP_EXTENSION = '.map'

# Hashed artifacts: <logical>-<hex>.js
HASH_MIN_LENGTH = 8

# URL prefix under which dist/js is served
SCRIPT_URL_PREFIX = '/js/'

# Root document written by the bundler and overridden by the entry page
ROOT_DOCUMENT = 'index.html'
ENTRY_PAGE = 'hero.html'


# =============================================================================
# MANIFESTS
# =============================================================================

# (source, destination) relative to WEB_DIR / DIST_DIR
STATIC_ASSETS = [
    ('images', 'images'),
    ('api', 'api'),
    ('css/fonts.css', 'css/fonts.css'),
    ('css/styles.css', 'css/styles.css'),
    ('manifest.json', 'manifest.json'),
    ('sw.js', 'sw.js'),
]

# Standalone pages not produced by the bundler
LEGACY_HTML_PAGES = [
    'auth/login.html',
    'auth/signup.html',
    'auth/verify.html',
    'auth/pin.html',
    'event/events-result.html',
    'explore.html',
    'favs.html',
    'hero.html',
    'profile.html',
    'ui/admin.html',
    'ui/profile.html',
]

# Script directories referenced directly by legacy pages
LEGACY_SCRIPT_DIRS = [
    'js/hero',
    'js/explore',
    'js/profile',
    'js/favs',
    'js/core',
    'js/ui',
]

# Modules outside the bundler entry graph: (source, destination)
LEGACY_MODULES = [
    ('js/auth/auth.ts', 'js/auth/auth.js'),
    ('js/auth/auth-guard.ts', 'js/auth/auth-guard.js'),
    ('js/auth/verify.ts', 'js/auth/verify.js'),
    ('js/constantes.ts', 'js/constantes.js'),
]

# Pages whose <script src> references point at re-emitted, hashed modules
REWRITE_PAGES = [
    'auth/login.html',
    'auth/signup.html',
    'auth/verify.html',
    'auth/pin.html',
    'event/events-result.html',
]


# =============================================================================
# REPORTING
# =============================================================================

# Write a per-run CSV of stage metrics
ENABLE_BUILD_REPORTS = True

BUILD_REPORTS_DIR = PROJECT_ROOT / 'build_reports'


# =============================================================================
# BUILD CONFIGURATION
# =============================================================================

def _is_truthy(value: Optional[str]) -> bool:
    return (value or '').strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class CopyManifestEntry:
    """One static file or directory to mirror into the output tree."""
    source: Path
    destination: Path
    kind: Optional[str] = None  # 'file', 'directory' or None to infer


@dataclass
class CompiledModuleSpec:
    """One standalone legacy module and where its compiled output belongs."""
    source: Path
    destination: Path


@dataclass
class BuildConfig:
    """
    Everything a build run needs, resolved once at process start.

    Attributes
    ----------
    project_root : Path
        Directory the external tools run in.
    web_dir : Path
        Source tree.
    dist_dir : Path
        Output tree, owned by one build run at a time.
    mode : str
        'production' or 'development'.
    release : str
        Release tag forwarded to the bundler.
    telemetry_disabled : bool
        Whether to ask tools to skip telemetry.
    environ : dict
        Snapshot of the process environment, used as the base
        environment for external tools. Settings meant for the tools
        themselves (mail credentials for the functions deploy, for
        example) pass through untouched.
    """

    project_root: Path
    web_dir: Path
    dist_dir: Path
    mode: str = DEFAULT_MODE
    release: str = 'pinot-frontend@unknown'
    telemetry_disabled: bool = True
    environ: dict = field(default_factory=dict)

    static_assets: list = field(default_factory=lambda: list(STATIC_ASSETS))
    legacy_html_pages: list = field(default_factory=lambda: list(LEGACY_HTML_PAGES))
    legacy_script_dirs: list = field(default_factory=lambda: list(LEGACY_SCRIPT_DIRS))
    legacy_modules: list = field(default_factory=lambda: list(LEGACY_MODULES))
    rewrite_pages: list = field(default_factory=lambda: list(REWRITE_PAGES))
    entry_page: str = ENTRY_PAGE

    stylesheet_command: list = field(default_factory=lambda: list(STYLESHEET_COMMAND))
    bundler_command: list = field(default_factory=lambda: list(BUNDLER_COMMAND))
    module_compiler: str = MODULE_COMPILER

    reports_enabled: bool = ENABLE_BUILD_REPORTS
    reports_dir: Optional[Path] = None
    state_dir: Optional[Path] = None

    def __post_init__(self):
        if self.reports_dir is None:
            self.reports_dir = self.project_root / BUILD_REPORTS_DIR.name
        if self.state_dir is None:
            self.state_dir = self.project_root / BUILD_STATE_DIR.name

    # -------------------------------------------------------------------------
    # Construction
    # -------------------------------------------------------------------------

    @classmethod
    def from_env(
        cls,
        environ: Optional[Mapping[str, str]] = None,
        project_root: Optional[Path] = None,
    ) -> 'BuildConfig':
        """
        Build the configuration from environment variables.

        Parameters
        ----------
        environ : Mapping, optional
            Environment to read (default: ``os.environ``).
        project_root : Path, optional
            Project root (default: PROJECT_ROOT).

        Returns
        -------
        BuildConfig
        """
        env = dict(os.environ if environ is None else environ)
        root = Path(project_root) if project_root else PROJECT_ROOT

        mode = env.get('NODE_ENV', '').strip().lower() or DEFAULT_MODE
        version = env.get('npm_package_version') or 'unknown'
        release = env.get('SENTRY_RELEASE') or f'pinot-frontend@{version}'

        if 'PINOT_TELEMETRY_DISABLED' in env:
            telemetry_disabled = _is_truthy(env['PINOT_TELEMETRY_DISABLED'])
        elif 'SENTRY_TELEMETRY' in env:
            telemetry_disabled = not _is_truthy(env['SENTRY_TELEMETRY'])
        else:
            telemetry_disabled = True

        config = cls(
            project_root=root,
            web_dir=root / WEB_DIR.name,
            dist_dir=root / DIST_DIR.name,
            mode=mode,
            release=release,
            telemetry_disabled=telemetry_disabled,
            environ=env,
        )

        manifest_path = env.get('PINOT_BUILD_MANIFEST')
        if manifest_path:
            config = config.with_manifest(Path(manifest_path))

        return config

    def with_manifest(self, path: Path) -> 'BuildConfig':
        """Return a copy with manifest lists overridden from a YAML file."""
        from utils.helpers import load_manifest

        overrides = load_manifest(path)
        return replace(self, **overrides)

    # -------------------------------------------------------------------------
    # Derived paths and manifests
    # -------------------------------------------------------------------------

    @property
    def is_production(self) -> bool:
        return self.mode == PRODUCTION

    @property
    def js_dist_dir(self) -> Path:
        return self.dist_dir / JS_DIST_DIR.name

    @property
    def asset_manifest_path(self) -> Path:
        return self.state_dir / ASSET_MANIFEST_PATH.name

    def copy_manifest(self) -> list[CopyManifestEntry]:
        """Static assets as manifest entries rooted at the source/output trees."""
        return [
            CopyManifestEntry(self.web_dir / src, self.dist_dir / dest)
            for src, dest in self.static_assets
        ]

    def compiled_modules(self) -> list[CompiledModuleSpec]:
        """Legacy module specs rooted at the source/output trees."""
        return [
            CompiledModuleSpec(self.web_dir / src, self.dist_dir / dest)
            for src, dest in self.legacy_modules
        ]

    def tool_environment(self) -> dict:
        """Environment for external tools: the snapshot plus build settings."""
        env = dict(self.environ)
        env['NODE_ENV'] = self.mode
        env['SENTRY_RELEASE'] = self.release
        if self.telemetry_disabled:
            env['SENTRY_TELEMETRY'] = 'false'
        return env


# =============================================================================
# VALIDATION
# =============================================================================

def validate_config(config: BuildConfig) -> bool:
    """
    Validate a build configuration.

    Parameters
    ----------
    config : BuildConfig
        Configuration to check

    Returns
    -------
    bool
        True if all validations pass

    Raises
    ------
    ValueError
        If any configuration is invalid
    """
    errors = []

    if config.mode not in BUILD_MODES:
        errors.append(f"Unknown build mode '{config.mode}'. Available: {', '.join(BUILD_MODES)}")

    if not config.web_dir.exists():
        errors.append(f"Source tree does not exist: {config.web_dir}")

    if config.dist_dir == config.web_dir:
        errors.append(f"Output tree must differ from source tree: {config.dist_dir}")

    unknown_pages = [p for p in config.rewrite_pages if p not in config.legacy_html_pages]
    if unknown_pages:
        errors.append(f"Rewrite pages are not copied legacy pages: {', '.join(unknown_pages)}")

    if errors:
        raise ValueError("Configuration errors:\n" + "\n".join(f"  - {e}" for e in errors))

    return True


# =============================================================================
# MODULE INITIALIZATION
# =============================================================================

if __name__ == '__main__':
    # Print configuration when run directly
    config = BuildConfig.from_env()
    print("Pinot Build Configuration")
    print("=" * 50)
    print(f"PROJECT_ROOT:  {config.project_root}")
    print(f"WEB_DIR:       {config.web_dir}")
    print(f"DIST_DIR:      {config.dist_dir}")
    print(f"MODE:          {config.mode}")
    print(f"RELEASE:       {config.release}")
    print(f"TELEMETRY:     {'disabled' if config.telemetry_disabled else 'enabled'}")
    print()
    print("Validating configuration...")
    try:
        validate_config(config)
        print("Configuration valid.")
    except ValueError as e:
        print(f"Configuration invalid:\n{e}")
