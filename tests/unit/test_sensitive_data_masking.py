import pytest

from config.settings import mask_sensitive_data

pytestmark = pytest.mark.unit


class TestSensitiveDataMasking:
    def test_password_masked(self):
        event_dict = {"event": "test", "data": "password='s3cret123'"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "s3cret123" not in result["data"]
        assert "***MASKED***" in result["data"]

    def test_token_masked(self):
        event_dict = {"event": "test", "header": "token=abc123xyz"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "abc123xyz" not in result["header"]
        assert "***MASKED***" in result["header"]

    def test_database_url_credentials_masked(self):
        event_dict = {"event": "test", "url": "postgres://app:hunter2@db:5432/inventory"}
        result = mask_sensitive_data(None, None, event_dict)
        assert "hunter2" not in result["url"]
        assert result["url"].endswith("@db:5432/inventory")

    def test_non_sensitive_data_unchanged(self):
        event_dict = {"event": "product.created", "name": "Widget Pro"}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["name"] == "Widget Pro"
        assert result["event"] == "product.created"

    def test_non_string_values_untouched(self):
        event_dict = {"event": "test", "stock": 5}
        result = mask_sensitive_data(None, None, event_dict)
        assert result["stock"] == 5
