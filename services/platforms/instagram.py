"""
Instagram (Basic Display) account linking
"""

from urllib.parse import urlencode, quote

from .base import BaseOAuthBridge, LinkedIdentity, OAuthCredentials, expires_at
from utils.structured_logging import get_structured_logger

logger = get_structured_logger(__name__)


class InstagramBridge(BaseOAuthBridge):
    """Instagram consent, long-lived token exchange and profile lookup"""

    @property
    def platform_name(self) -> str:
        return "instagram"

    def client_credentials(self) -> tuple:
        return self.config.instagram_app_id, self.config.instagram_app_secret

    def build_authorization_url(self, credentials: OAuthCredentials) -> str:
        params = {
            "client_id": credentials.client_id,
            "redirect_uri": credentials.redirect_uri,
            "scope": ",".join(credentials.scopes),
            "response_type": "code",
        }
        return f"{self.settings['authorize_url']}?{urlencode(params, quote_via=quote, safe=',')}"

    async def exchange_code(self, code: str, credentials: OAuthCredentials) -> LinkedIdentity:
        token_response = await self.client.post(
            self.settings["token_url"],
            data={
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "grant_type": "authorization_code",
                "redirect_uri": credentials.redirect_uri,
                "code": code,
            }
        )
        token_data = self._json(token_response, "token exchange")
        if token_data.get("error") or token_data.get("error_message") or not token_data.get("access_token"):
            if token_data.get("error_message") and not token_data.get("error_description"):
                token_data["error_description"] = token_data["error_message"]
            raise self._fail("token", token_data, "Failed to exchange code")

        short_token = token_data["access_token"]
        user_id = str(token_data.get("user_id", ""))

        access_token, expires_in = await self._long_lived_token(short_token, credentials)

        user_response = await self.client.get(
            f"{self.settings['api_base_url']}/me",
            params={"fields": "id,username", "access_token": access_token}
        )
        user_data = self._json(user_response, "user info")
        if user_data.get("error"):
            raise self._fail("identity", user_data, "Failed to get user info")

        identifier = user_id or str(user_data.get("id", ""))
        if not identifier:
            raise self._fail("identity", {}, "Failed to get user info")

        return LinkedIdentity(
            access_token=access_token,
            token_expires_at=expires_at(expires_in),
            account_name=user_data.get("username") or f"Instagram User {identifier[:5]}",
            account_identifier=identifier,
        )

    async def _long_lived_token(self, short_token: str, credentials: OAuthCredentials) -> tuple:
        """Swap the short-lived token for a long-lived one, keeping the short token on failure"""
        response = await self.client.get(
            f"{self.settings['api_base_url']}/access_token",
            params={
                "grant_type": "ig_exchange_token",
                "client_secret": credentials.client_secret,
                "access_token": short_token,
            }
        )
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict) or not data.get("access_token"):
            logger.warning("Long-lived token exchange failed, keeping short-lived token", platform=self.platform_name)
            return short_token, None
        return data["access_token"], data.get("expires_in")
