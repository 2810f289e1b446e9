"""Tests for library settings."""

from ecdhes.config import Settings, get_settings


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("ECDHES_REQUIRE_EPK_CURVE_MATCH", raising=False)

        assert get_settings().require_epk_curve_match is True

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ECDHES_REQUIRE_EPK_CURVE_MATCH", "false")

        assert get_settings().require_epk_curve_match is False

    def test_cached(self):
        assert get_settings() is get_settings()

    def test_model_config(self):
        assert Settings.model_config["env_prefix"] == "ECDHES_"
        assert Settings.model_config["case_sensitive"] is False

    def test_no_digest_setting(self, monkeypatch):
        """The Concat KDF digest is not configurable."""
        monkeypatch.setenv("ECDHES_KDF_HASH", "SHA-512")

        assert "kdf_hash" not in Settings.model_fields
        assert not hasattr(get_settings(), "kdf_hash")
