"""
Facebook (Graph API) account linking
"""

import secrets
from urllib.parse import urlencode, quote

from .base import BaseOAuthBridge, LinkedIdentity, OAuthCredentials, expires_at
from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)


class FacebookBridge(BaseOAuthBridge):
    """Facebook consent with long-lived token exchange"""

    @property
    def platform_name(self) -> str:
        return "facebook"

    def client_credentials(self) -> tuple:
        return self.config.facebook_app_id, self.config.facebook_app_secret

    def build_authorization_url(self, credentials: OAuthCredentials) -> str:
        params = {
            "client_id": credentials.client_id,
            "redirect_uri": credentials.redirect_uri,
            "scope": ",".join(credentials.scopes),
            "response_type": "code",
            "state": secrets.token_urlsafe(16),
        }
        return f"{self.settings['authorize_url']}?{urlencode(params, quote_via=quote, safe=',')}"

    async def exchange_code(self, code: str, credentials: OAuthCredentials) -> LinkedIdentity:
        """Exchange code for Facebook access token (short and long lived)"""
        api_base = self.settings["api_base_url"]

        # Step 1: short-lived token
        token_response = await self.client.get(
            f"{api_base}/oauth/access_token",
            params={
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "redirect_uri": credentials.redirect_uri,
                "code": code,
            }
        )
        token_data = self._json(token_response, "token exchange")
        if token_data.get("error") or not token_data.get("access_token"):
            raise self._fail("token", token_data, "Failed to exchange code")
        short_token = token_data["access_token"]

        # Step 2: identity
        user_response = await self.client.get(
            f"{api_base}/me",
            params={"fields": "id,name,email", "access_token": short_token}
        )
        user_info = self._json(user_response, "user info")
        if user_info.get("error"):
            raise self._fail("identity", user_info, "Failed to get user info")
        if not user_info.get("id"):
            raise self._fail("identity", {}, "Failed to get user info")

        # Step 3: exchange for long-lived token
        long_response = await self.client.get(
            f"{api_base}/oauth/access_token",
            params={
                "grant_type": "fb_exchange_token",
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "fb_exchange_token": short_token,
            }
        )
        try:
            long_data = long_response.json()
        except ValueError:
            long_data = {}
        if not isinstance(long_data, dict):
            long_data = {}
        if not long_data.get("access_token"):
            logger.warning("Long-lived token exchange failed, keeping short-lived token", platform=self.platform_name)

        metadata = {}
        if user_info.get("email"):
            metadata["email"] = user_info["email"]

        return LinkedIdentity(
            access_token=long_data.get("access_token") or short_token,
            token_expires_at=expires_at(long_data.get("expires_in")),
            account_name=user_info.get("name") or "Facebook User",
            account_identifier=str(user_info["id"]),
            metadata=metadata,
        )
