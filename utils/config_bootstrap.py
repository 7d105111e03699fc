"""
Fail-fast configuration and secrets validation
"""

import sys
from typing import Dict, List, Optional

from utils.config import Config, get_config
from utils.logging import get_logger

logger = get_logger(__name__)


class ConfigBootstrap:
    """Fail-fast configuration validator"""

    # Environment name -> Config attribute
    CRITICAL_SECRETS: Dict[str, str] = {
        "DATABASE_URL": "database_url",
        "SUPABASE_URL": "supabase_url",
        "SUPABASE_JWT_SECRET": "supabase_jwt_secret",
        "SUPABASE_SERVICE_ROLE_KEY": "supabase_service_role_key",
    }

    # Missing platform credentials only disable that platform's connect flow
    PLATFORM_SECRETS: Dict[str, Dict[str, str]] = {
        "youtube": {"YOUTUBE_CLIENT_ID": "youtube_client_id", "YOUTUBE_CLIENT_SECRET": "youtube_client_secret"},
        "tiktok": {"TIKTOK_CLIENT_KEY": "tiktok_client_key", "TIKTOK_CLIENT_SECRET": "tiktok_client_secret"},
        "instagram": {"INSTAGRAM_APP_ID": "instagram_app_id", "INSTAGRAM_APP_SECRET": "instagram_app_secret"},
        "facebook": {"FACEBOOK_APP_ID": "facebook_app_id", "FACEBOOK_APP_SECRET": "facebook_app_secret"},
    }

    MIN_JWT_SECRET_LENGTH = 32

    def __init__(self, config: Optional[Config] = None):
        self._config = config

    def validate_startup_config(self) -> List[str]:
        """Validate all required configuration on startup. Returns the warnings issued."""
        try:
            config = self._config or get_config()
        except Exception as e:
            self._abort_startup(f"Configuration validation failed: {str(e)}")
            return []

        missing_critical = self._check_critical_secrets(config)
        if missing_critical:
            self._abort_startup(f"CRITICAL: Missing required secrets: {', '.join(missing_critical)}")
            return []

        try:
            self._validate_secret_formats(config)
        except ValueError as e:
            self._abort_startup(f"Configuration validation failed: {str(e)}")
            return []

        warnings = self._check_optional_secrets(config)
        for warning in warnings:
            logger.warning(warning)

        logger.info("All configuration validation passed")
        return warnings

    def _check_critical_secrets(self, config: Config) -> List[str]:
        """Check critical secrets are present"""
        missing = []
        for env_name, attribute in self.CRITICAL_SECRETS.items():
            value = getattr(config, attribute, None)
            if not value or len(value.strip()) == 0:
                missing.append(env_name)
        return missing

    def _check_optional_secrets(self, config: Config) -> List[str]:
        """Warnings for platforms and billing that cannot be used as configured"""
        warnings = []
        for platform, secrets in self.PLATFORM_SECRETS.items():
            missing = [env_name for env_name, attribute in secrets.items() if not getattr(config, attribute, None)]
            if missing:
                warnings.append(f"{platform} account linking disabled, missing: {', '.join(missing)}")
        if not config.stripe_secret_key:
            warnings.append("Billing disabled, missing: STRIPE_SECRET_KEY")
        return warnings

    def _validate_secret_formats(self, config: Config) -> None:
        """Validate secret formats"""
        if not config.supabase_url.startswith("https://"):
            raise ValueError("SUPABASE_URL must be a valid HTTPS URL")

        if len(config.supabase_jwt_secret) < self.MIN_JWT_SECRET_LENGTH:
            raise ValueError(f"SUPABASE_JWT_SECRET must be at least {self.MIN_JWT_SECRET_LENGTH} characters")

        if config.stripe_secret_key and not config.stripe_secret_key.startswith(("sk_", "rk_")):
            raise ValueError("STRIPE_SECRET_KEY must start with 'sk_' or 'rk_'")

    def _abort_startup(self, message: str) -> None:
        """Abort application startup with error message"""
        logger.error(f"STARTUP ABORTED: {message}")
        sys.exit(1)


def validate_config_on_startup() -> List[str]:
    """Entry point for startup config validation"""
    bootstrap = ConfigBootstrap()
    return bootstrap.validate_startup_config()


# CLI script for ops validation
if __name__ == "__main__":
    print("Validating MultiMediaBlast configuration...")
    try:
        validate_config_on_startup()
        print("All configuration is valid!")
    except SystemExit:
        print("Configuration validation failed!")
        sys.exit(1)
