"""Unit tests for ValidationConfig."""

from __future__ import annotations

import pytest

from relkit_core.validation.config import CHECK_NAMES, ValidationConfig


class TestValidationConfig:
    """Tests for ValidationConfig."""

    def test_all_checks_enabled_by_default(self) -> None:
        config = ValidationConfig()
        assert config.enabled_checks == ["build", "lint", "fmt", "toml-fmt"]
        assert config.needs_dependencies

    def test_only_keeps_report_order(self) -> None:
        config = ValidationConfig.only(["toml-fmt", "fmt"])
        assert config.enabled_checks == ["fmt", "toml-fmt"]

    def test_format_checks_need_no_dependencies(self) -> None:
        assert not ValidationConfig.only(["fmt", "toml-fmt"]).needs_dependencies

    def test_only_rejects_unknown_names(self) -> None:
        with pytest.raises(ValueError, match="clippy"):
            ValidationConfig.only(["clippy"])

    def test_only_passes_extra_fields(self) -> None:
        config = ValidationConfig.only(CHECK_NAMES, max_workers=1)
        assert config.max_workers == 1
