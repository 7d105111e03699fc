"""
Unit tests for configuration bootstrap - critical for preventing startup with invalid config
"""

import pytest
from unittest.mock import patch

from utils.config_bootstrap import ConfigBootstrap, validate_config_on_startup


class TestConfigBootstrap:
    """Test fail-fast configuration validation"""

    def test_validate_startup_config_success(self, test_config):
        """
        Business Critical: Valid configuration should pass validation without errors
        """
        with patch('utils.config_bootstrap.logger') as mock_logger:
            warnings = ConfigBootstrap(test_config).validate_startup_config()

        assert warnings == []
        mock_logger.info.assert_called_with("All configuration validation passed")

    def test_missing_critical_secret_aborts(self, test_config):
        """
        Business Critical: Missing critical secrets must abort startup to prevent runtime failures
        """
        config = test_config.model_copy(update={"supabase_service_role_key": "  "})

        with patch('utils.config_bootstrap.logger') as mock_logger, pytest.raises(SystemExit) as exc_info:
            ConfigBootstrap(config).validate_startup_config()

        assert exc_info.value.code == 1
        message = mock_logger.error.call_args[0][0]
        assert message.startswith("STARTUP ABORTED: CRITICAL: Missing required secrets")
        assert "SUPABASE_SERVICE_ROLE_KEY" in message

    def test_short_jwt_secret_aborts(self, test_config):
        config = test_config.model_copy(update={"supabase_jwt_secret": "too-short"})

        with patch('utils.config_bootstrap.logger'), pytest.raises(SystemExit):
            ConfigBootstrap(config).validate_startup_config()

    def test_malformed_stripe_key_aborts(self, test_config):
        config = test_config.model_copy(update={"stripe_secret_key": "pk_test_123"})

        with patch('utils.config_bootstrap.logger') as mock_logger, pytest.raises(SystemExit):
            ConfigBootstrap(config).validate_startup_config()

        assert "STRIPE_SECRET_KEY" in mock_logger.error.call_args[0][0]

    def test_missing_platform_credentials_only_warn(self, test_config):
        """
        Business Critical: One unconfigured platform must not take the whole API down
        """
        config = test_config.model_copy(update={"tiktok_client_secret": None, "stripe_secret_key": None})

        with patch('utils.config_bootstrap.logger') as mock_logger:
            warnings = ConfigBootstrap(config).validate_startup_config()

        assert warnings == [
            "tiktok account linking disabled, missing: TIKTOK_CLIENT_SECRET",
            "Billing disabled, missing: STRIPE_SECRET_KEY",
        ]
        assert mock_logger.warning.call_count == 2

    def test_unloadable_config_aborts(self):
        with patch('utils.config_bootstrap.get_config', side_effect=RuntimeError("DATABASE_URL is required")), \
             patch('utils.config_bootstrap.logger'), \
             pytest.raises(SystemExit):
            validate_config_on_startup()
