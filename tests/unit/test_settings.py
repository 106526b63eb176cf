"""Tests for merknad.config -- Settings, sub-models, env overrides.

Every test constructs Settings(_env_file=None, ...) to avoid reading real .env files.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from merknad.config import (
    _PROJECT_ROOT,
    AppConfig,
    EditorSettings,
    ImageSettings,
    Settings,
    get_settings,
)


class TestDefaults:
    """Defaults without any environment configuration."""

    def test_image_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.image.target_width == 600
        assert s.image.output_format == "JPEG"
        assert s.image.quality == 75
        assert s.image.max_encoded_bytes == 5_000_000

    def test_editor_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.editor.auto_correct_on_change is False
        assert s.editor.clipboard_timeout == 5.0
        assert s.editor.language == "nb-NO"

    def test_app_defaults(self) -> None:
        s = Settings(_env_file=None)  # type: ignore[call-arg]
        assert s.app.port == 8080
        assert s.app.log_dir == Path("logs")
        assert isinstance(s.app.storage_secret, SecretStr)

    def test_env_file_points_at_project_root(self) -> None:
        assert Settings.model_config.get("env_file") == _PROJECT_ROOT / ".env"


class TestTypeValidation:
    """Pydantic type validation on Settings construction."""

    def test_explicit_sub_models(self) -> None:
        s = Settings(
            _env_file=None,  # type: ignore[call-arg]
            image=ImageSettings(target_width=320, output_format="WEBP", quality=60),
            editor=EditorSettings(auto_correct_on_change=True, language="en-US"),
            app=AppConfig(port=9090, storage_secret=SecretStr("s3cret")),
        )
        assert s.image.target_width == 320
        assert s.image.output_format == "WEBP"
        assert s.editor.auto_correct_on_change is True
        assert s.app.storage_secret.get_secret_value() == "s3cret"

    @pytest.mark.parametrize("quality", [0, 101])
    def test_quality_out_of_range(self, quality: int) -> None:
        with pytest.raises(ValidationError):
            ImageSettings(quality=quality)

    def test_non_positive_target_width(self) -> None:
        with pytest.raises(ValidationError):
            ImageSettings(target_width=0)

    def test_unknown_output_format(self) -> None:
        with pytest.raises(ValidationError):
            ImageSettings(output_format="GIF")  # type: ignore[arg-type]

    def test_secret_not_in_repr(self) -> None:
        s = AppConfig(storage_secret=SecretStr("do-not-print"))
        assert "do-not-print" not in repr(s)


class TestEnvOverrides:
    """Nested env vars use the double-underscore delimiter."""

    def test_nested_env_vars(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMAGE__TARGET_WIDTH", "480")
        monkeypatch.setenv("EDITOR__AUTO_CORRECT_ON_CHANGE", "true")
        monkeypatch.setenv("APP__PORT", "9000")

        s = Settings(_env_file=None)  # type: ignore[call-arg]

        assert s.image.target_width == 480
        assert s.editor.auto_correct_on_change is True
        assert s.app.port == 9000

    def test_invalid_env_value_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMAGE__QUALITY", "150")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)  # type: ignore[call-arg]

    def test_unrelated_env_vars_ignored(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SOMETHING_ELSE", "x")
        Settings(_env_file=None)  # type: ignore[call-arg]


class TestGetSettings:
    """Cached singleton access."""

    def test_cached(self) -> None:
        assert get_settings() is get_settings()

    def test_cache_clear_picks_up_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("IMAGE__MAX_ENCODED_BYTES", "1234")
        get_settings.cache_clear()
        assert get_settings().image.max_encoded_bytes == 1234
