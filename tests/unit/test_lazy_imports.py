"""Tests for lazy import system in smarthub.__init__."""

from __future__ import annotations

import importlib
import sys

import pytest


class TestLazyImports:
    """Test PEP 562 lazy loading in smarthub.__init__."""

    def test_lazy_import_does_not_eagerly_load(self) -> None:
        """Importing smarthub does not load its subpackages."""
        cached = [name for name in sys.modules if name.startswith("smarthub")]
        saved = {name: sys.modules.pop(name) for name in cached}
        try:
            importlib.import_module("smarthub")

            assert "smarthub.core" not in sys.modules
            assert "smarthub.models" not in sys.modules
            assert "smarthub.server" not in sys.modules
        finally:
            for name in [n for n in sys.modules if n.startswith("smarthub")]:
                del sys.modules[name]
            sys.modules.update(saved)

    def test_lazy_import_resolves_on_access(self) -> None:
        from smarthub import SmartModel
        from smarthub.models.smart_model import SmartModel as DirectSmartModel

        assert SmartModel is DirectSmartModel

    def test_lazy_import_caches_after_first_access(self) -> None:
        import smarthub

        _ = smarthub.Server
        assert "Server" in vars(smarthub)

    def test_lazy_import_invalid_attribute(self) -> None:
        import smarthub

        with pytest.raises(AttributeError, match="no_such_thing"):
            _ = getattr(smarthub, "no_such_thing")  # noqa: B009

    def test_all_exports_are_in_lazy_imports(self) -> None:
        import smarthub

        assert set(smarthub.__all__) == set(smarthub._LAZY_IMPORTS)

    def test_dir_returns_all(self) -> None:
        import smarthub

        assert dir(smarthub) == smarthub.__all__

    def test_version_is_accessible(self) -> None:
        import smarthub

        assert isinstance(smarthub.__version__, str)
        assert smarthub.__version__
