#!/usr/bin/env python3
"""
Tests for src/config.py

Tests cover:
- Configuration imports
- BuildConfig.from_env() environment handling
- Manifest overrides from YAML
- validate_config() function
"""
from __future__ import annotations

import pytest
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from config import (
    BuildConfig,
    CompiledModuleSpec,
    CopyManifestEntry,
    validate_config,
)


class TestConfigImports:
    """Tests for configuration module imports."""

    def test_import_paths(self):
        """All path constants can be imported."""
        from config import PROJECT_ROOT, WEB_DIR, DIST_DIR, JS_DIST_DIR
        assert isinstance(PROJECT_ROOT, Path)
        assert WEB_DIR.parent == PROJECT_ROOT
        assert JS_DIST_DIR.parent == DIST_DIR

    def test_import_manifests(self):
        """Manifests can be imported and are consistent."""
        from config import LEGACY_HTML_PAGES, REWRITE_PAGES, ENTRY_PAGE, STATIC_ASSETS
        assert set(REWRITE_PAGES) <= set(LEGACY_HTML_PAGES)
        assert ENTRY_PAGE in LEGACY_HTML_PAGES
        assert ('sw.js', 'sw.js') in STATIC_ASSETS

    def test_sourcemap_mode_per_build_mode(self):
        """Every build mode has a source map setting."""
        from config import BUILD_MODES, SOURCEMAP_MODES
        assert set(BUILD_MODES) == set(SOURCEMAP_MODES)
        assert SOURCEMAP_MODES['production'] == 'hidden'


class TestFromEnv:
    """Tests for BuildConfig.from_env()."""

    def test_defaults(self, temp_dir):
        """Empty environment gives a production build."""
        config = BuildConfig.from_env({}, project_root=temp_dir)
        assert config.mode == 'production'
        assert config.is_production
        assert config.release == 'pinot-frontend@unknown'
        assert config.telemetry_disabled is True
        assert config.web_dir == temp_dir / 'web'
        assert config.dist_dir == temp_dir / 'dist'
        assert config.js_dist_dir == temp_dir / 'dist' / 'js'

    def test_development_mode(self, temp_dir):
        """NODE_ENV selects the mode, case-insensitively."""
        config = BuildConfig.from_env({'NODE_ENV': 'Development'}, project_root=temp_dir)
        assert config.mode == 'development'
        assert not config.is_production

    def test_release_from_package_version(self, temp_dir):
        """Release falls back to the package version."""
        config = BuildConfig.from_env({'npm_package_version': '1.4.0'}, project_root=temp_dir)
        assert config.release == 'pinot-frontend@1.4.0'

    def test_explicit_release(self, temp_dir):
        """SENTRY_RELEASE wins over the package version."""
        env = {'SENTRY_RELEASE': 'web@2024.1', 'npm_package_version': '1.4.0'}
        config = BuildConfig.from_env(env, project_root=temp_dir)
        assert config.release == 'web@2024.1'

    def test_telemetry_opt_in(self, temp_dir):
        """Telemetry can be re-enabled explicitly."""
        config = BuildConfig.from_env({'PINOT_TELEMETRY_DISABLED': '0'}, project_root=temp_dir)
        assert config.telemetry_disabled is False

        config = BuildConfig.from_env({'SENTRY_TELEMETRY': 'true'}, project_root=temp_dir)
        assert config.telemetry_disabled is False

    def test_mail_settings_pass_through(self, temp_dir):
        """Mail settings are not interpreted, only forwarded to the tools."""
        env = {'EMAIL_USER': 'ops@example.com', 'EMAIL_PORT': 'smtp'}
        config = BuildConfig.from_env(env, project_root=temp_dir)
        assert not hasattr(config, 'email')
        assert config.tool_environment()['EMAIL_PORT'] == 'smtp'

    def test_environment_snapshot_not_shared(self, temp_dir):
        """The config keeps its own copy of the environment."""
        env = {'NODE_ENV': 'production'}
        config = BuildConfig.from_env(env, project_root=temp_dir)
        env['NODE_ENV'] = 'development'
        assert config.environ['NODE_ENV'] == 'production'


class TestToolEnvironment:
    """Tests for BuildConfig.tool_environment()."""

    def test_sets_build_settings(self, temp_dir):
        """Mode, release and telemetry are forwarded."""
        config = BuildConfig.from_env({'PATH': '/usr/bin'}, project_root=temp_dir)
        env = config.tool_environment()
        assert env['PATH'] == '/usr/bin'
        assert env['NODE_ENV'] == 'production'
        assert env['SENTRY_RELEASE'] == config.release
        assert env['SENTRY_TELEMETRY'] == 'false'


class TestManifests:
    """Tests for manifest helpers and YAML overrides."""

    def test_copy_manifest_is_rooted(self, build_config):
        """Static assets are rooted at the source and output trees."""
        entries = build_config.copy_manifest()
        assert all(isinstance(e, CopyManifestEntry) for e in entries)
        sw = [e for e in entries if e.source.name == 'sw.js'][0]
        assert sw.source == build_config.web_dir / 'sw.js'
        assert sw.destination == build_config.dist_dir / 'sw.js'

    def test_compiled_modules_are_rooted(self, build_config):
        """Legacy modules are rooted at the source and output trees."""
        specs = build_config.compiled_modules()
        assert all(isinstance(s, CompiledModuleSpec) for s in specs)
        assert specs[0].source == build_config.web_dir / 'js' / 'auth' / 'auth.ts'
        assert specs[0].destination == build_config.dist_dir / 'js' / 'auth' / 'auth.js'

    def test_manifest_override_from_env(self, temp_dir, write_file):
        """PINOT_BUILD_MANIFEST replaces the fixed lists."""
        manifest = write_file(temp_dir / 'build.yml', (
            "legacy_html_pages:\n"
            "  - auth/login.html\n"
            "rewrite_pages:\n"
            "  - auth/login.html\n"
            "legacy_modules:\n"
            "  - source: js/legacy.ts\n"
            "    destination: js/legacy.js\n"
            "entry_page: auth/login.html\n"
        ))
        config = BuildConfig.from_env({'PINOT_BUILD_MANIFEST': str(manifest)}, project_root=temp_dir)
        assert config.legacy_html_pages == ['auth/login.html']
        assert config.legacy_modules == [('js/legacy.ts', 'js/legacy.js')]
        assert config.entry_page == 'auth/login.html'
        # Untouched lists keep their defaults
        assert ('sw.js', 'sw.js') in config.static_assets


class TestValidateConfig:
    """Tests for validate_config() function."""

    def test_valid_config_passes(self, build_config):
        """A config for an existing source tree validates."""
        assert validate_config(build_config) is True

    def test_unknown_mode_raises(self, build_config):
        """Unknown build modes are rejected."""
        build_config.mode = 'staging'
        with pytest.raises(ValueError) as exc_info:
            validate_config(build_config)
        assert "Unknown build mode 'staging'" in str(exc_info.value)

    def test_missing_source_tree_raises(self, temp_dir):
        """A missing web/ directory is rejected."""
        config = BuildConfig.from_env({}, project_root=temp_dir)
        with pytest.raises(ValueError) as exc_info:
            validate_config(config)
        assert 'Source tree does not exist' in str(exc_info.value)

    def test_rewrite_pages_must_be_copied(self, build_config):
        """Rewrite pages must be among the copied legacy pages."""
        build_config.rewrite_pages = ['auth/unknown.html']
        with pytest.raises(ValueError) as exc_info:
            validate_config(build_config)
        assert 'auth/unknown.html' in str(exc_info.value)

    def test_reports_all_errors(self, temp_dir):
        """Every problem is listed, not just the first."""
        config = BuildConfig.from_env({'NODE_ENV': 'staging'}, project_root=temp_dir)
        with pytest.raises(ValueError) as exc_info:
            validate_config(config)
        message = str(exc_info.value)
        assert 'Unknown build mode' in message
        assert 'Source tree does not exist' in message
