"""Tests for API settings."""

from avatarvoice.app.settings import APISettings


class TestAPISettings:
    """Tests for APISettings class."""

    def test_defaults(self, monkeypatch) -> None:
        """Test default host and port."""
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.delenv("AVATARVOICE_API_PORT", raising=False)
        settings = APISettings()
        assert settings.host == "127.0.0.1"
        assert settings.port == 8000

    def test_prefixed_port(self, monkeypatch) -> None:
        """Test the port read from the prefixed variable."""
        monkeypatch.delenv("PORT", raising=False)
        monkeypatch.setenv("AVATARVOICE_API_PORT", "9100")
        assert APISettings().port == 9100

    def test_plain_port(self, monkeypatch) -> None:
        """Test the port read from PORT."""
        monkeypatch.delenv("AVATARVOICE_API_PORT", raising=False)
        monkeypatch.setenv("PORT", "9200")
        assert APISettings().port == 9200

    def test_prefixed_port_wins(self, monkeypatch) -> None:
        """Test the prefixed variable takes precedence over PORT."""
        monkeypatch.setenv("AVATARVOICE_API_PORT", "9100")
        monkeypatch.setenv("PORT", "9200")
        assert APISettings().port == 9100
