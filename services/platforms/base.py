"""
Base OAuth bridge interface shared by every platform
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, List, Optional

import httpx
from pydantic import BaseModel, Field

from utils.config import Config
from utils.exceptions import ConfigurationError, PlatformError, ValidationError
from utils.http_client import get_async_client
from utils.platform_settings import get_platform_setting
from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)


class LinkedIdentity(BaseModel):
    """Tokens and identity returned by a successful OAuth callback"""
    access_token: str
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    account_name: str
    account_identifier: str
    metadata: Dict[str, Any] = Field(default_factory=dict)


class OAuthCredentials(BaseModel):
    """Client credentials and redirect used for one platform"""
    client_id: str
    client_secret: str
    redirect_uri: str
    scopes: List[str]


def expires_at(expires_in: Optional[Any]) -> Optional[datetime]:
    """Absolute expiry from a relative `expires_in` (seconds)"""
    if not expires_in:
        return None
    return datetime.now(timezone.utc) + timedelta(seconds=int(expires_in))


def provider_error_text(data: Dict[str, Any], default: str) -> str:
    """Best human-readable error message from a provider error payload"""
    error = data.get("error")
    if isinstance(error, dict):
        return error.get("message") or data.get("error_description") or default
    return data.get("error_description") or error or default


class BaseOAuthBridge(ABC):
    """Turns a user's consent into a stored credential for one platform"""

    def __init__(self, config: Config, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self.client = client or get_async_client()
        self.settings = get_platform_setting(self.platform_name)

    @property
    @abstractmethod
    def platform_name(self) -> str:
        """Platform identifier"""
        pass

    @property
    def display_name(self) -> str:
        return self.settings.get("display_name", self.platform_name.title())

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri(self.platform_name)

    @abstractmethod
    def client_credentials(self) -> tuple:
        """(client_id, client_secret) from configuration, either may be None"""
        pass

    def credentials(self) -> OAuthCredentials:
        """Configured credentials or a ConfigurationError naming what is missing"""
        client_id, client_secret = self.client_credentials()
        if not client_id or not client_secret:
            missing = []
            if not client_id:
                missing.append(self.settings["client_id_env"])
            if not client_secret:
                missing.append(self.settings["client_secret_env"])
            raise ConfigurationError(
                f"{self.display_name} OAuth credentials are not configured. "
                f"Please set {' and '.join(missing)} in the server environment.",
                {"platform": self.platform_name, "missing": missing}
            )
        return OAuthCredentials(
            client_id=client_id,
            client_secret=client_secret,
            redirect_uri=self.redirect_uri,
            scopes=self.settings.get("scopes", [])
        )

    async def connect(self) -> Dict[str, str]:
        """Build the provider consent URL"""
        credentials = self.credentials()
        url = self.build_authorization_url(credentials)
        logger.info("Generated authorization URL", platform=self.platform_name, redirect_uri=credentials.redirect_uri)
        return {"url": url}

    async def callback(self, code: Optional[str]) -> LinkedIdentity:
        """Exchange an authorization code for tokens and the linked identity"""
        if not code:
            raise ValidationError("No code provided", {"platform": self.platform_name})
        credentials = self.credentials()
        try:
            return await self.exchange_code(code, credentials)
        except httpx.HTTPError as e:
            logger.error("Provider request failed", platform=self.platform_name, error=str(e))
            raise PlatformError(
                f"Failed to reach {self.display_name}: {str(e)}",
                {"platform": self.platform_name}
            )

    @abstractmethod
    def build_authorization_url(self, credentials: OAuthCredentials) -> str:
        """Provider consent URL"""
        pass

    @abstractmethod
    async def exchange_code(self, code: str, credentials: OAuthCredentials) -> LinkedIdentity:
        """Token exchange followed by the identity lookup"""
        pass

    def _json(self, response: httpx.Response, step: str) -> Dict[str, Any]:
        """Decode a provider response, raising PlatformError on non-JSON bodies"""
        try:
            data = response.json()
        except ValueError:
            raise PlatformError(
                f"{self.display_name} {step} returned an invalid response",
                {"platform": self.platform_name, "status": response.status_code}
            )
        if not isinstance(data, dict):
            raise PlatformError(
                f"{self.display_name} {step} returned an unexpected payload",
                {"platform": self.platform_name, "status": response.status_code}
            )
        return data

    def _fail(self, step: str, data: Dict[str, Any], default: str) -> PlatformError:
        message = provider_error_text(data, default)
        logger.error("Provider returned an error", platform=self.platform_name, step=step, error=message)
        return PlatformError(message, {"platform": self.platform_name, "step": step})
