"""Tests for ServerSettings."""

import pytest
from pydantic import SecretStr, ValidationError

from nntplink.config import ServerSettings


class TestServerSettings:
    """Tests for ServerSettings model."""

    def test_defaults(self):
        """Test plain connection defaults."""
        settings = ServerSettings(host="news.example.com")
        assert settings.secure is False
        assert settings.effective_service == "nntp"
        assert settings.port == 119
        assert not settings.has_credentials

    def test_secure_default_service(self):
        """Test TLS connections default to the nntps port."""
        settings = ServerSettings(host="news.example.com", secure=True)
        assert settings.effective_service == "nntps"
        assert settings.port == 563

    @pytest.mark.parametrize("service, port", [(443, 443), ("8119", 8119), ("NNTP", 119)])
    def test_explicit_service(self, service, port):
        """Test explicit ports and service names."""
        settings = ServerSettings(host="h", service=service)
        assert settings.effective_service == service
        assert settings.port == port

    @pytest.mark.parametrize("service", ["gopher", 0, 70000])
    def test_invalid_service(self, service):
        """Test unknown services and out of range ports."""
        with pytest.raises(ValidationError):
            ServerSettings(host="h", service=service)

    def test_empty_host(self):
        """Test host is required."""
        with pytest.raises(ValidationError):
            ServerSettings(host="")

    def test_credentials(self):
        """Test password is kept secret."""
        settings = ServerSettings(host="h", username="reader", password="hunter2")
        assert settings.has_credentials
        assert isinstance(settings.password, SecretStr)
        assert settings.password.get_secret_value() == "hunter2"
        assert "hunter2" not in repr(settings)

    def test_password_without_username(self):
        """Test a password alone is rejected."""
        with pytest.raises(ValidationError):
            ServerSettings(host="h", password="hunter2")

    def test_buffer_sizes(self):
        """Test read size may not exceed the buffer cap."""
        settings = ServerSettings(host="h", max_buffer_size=4096, read_size=4096)
        assert settings.read_size == 4096
        with pytest.raises(ValidationError):
            ServerSettings(host="h", max_buffer_size=1024, read_size=4096)
        with pytest.raises(ValidationError):
            ServerSettings(host="h", max_buffer_size=0)

    def test_frozen(self):
        """Test settings are immutable."""
        settings = ServerSettings(host="h")
        with pytest.raises(ValidationError):
            settings.host = "other"
