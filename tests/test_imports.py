"""Test module imports and package functionality."""

from __future__ import annotations

from types import ModuleType


class TestCoreImports:
    """Test that core modules can be imported successfully."""

    def test_import_main_package(self) -> None:
        """Test that main package can be imported."""
        import duscan

        assert isinstance(duscan, ModuleType)
        assert callable(duscan.main)

    def test_import_app_module(self) -> None:
        """Test that app module can be imported."""
        import duscan.app

        assert duscan.app.cli is not None
        assert duscan.app.ApplicationRunner is not None

    def test_import_config_modules(self) -> None:
        """Test that config modules can be imported."""
        import duscan.config
        import duscan.config.loader
        import duscan.config.models

        assert duscan.config.DuScanConfig is duscan.config.models.DuScanConfig
        assert duscan.config.load_config is duscan.config.loader.load_config

    def test_import_filesystem_modules(self) -> None:
        """Test that the filesystem package re-exports its public names."""
        import duscan.core.data.filesystem as filesystem

        for name in filesystem.__all__:
            assert hasattr(filesystem, name), name

    def test_import_utils(self) -> None:
        """Test that utility modules can be imported."""
        import duscan.utils
        import duscan.utils.logging

        assert callable(duscan.utils.format_human_size)
        assert callable(duscan.utils.logging.configure_logging)
