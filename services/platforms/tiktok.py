"""
TikTok (Login Kit v2) account linking
"""

import secrets
from urllib.parse import urlencode, quote

from .base import BaseOAuthBridge, LinkedIdentity, OAuthCredentials, expires_at


class TikTokBridge(BaseOAuthBridge):
    """TikTok consent and identity lookup"""

    @property
    def platform_name(self) -> str:
        return "tiktok"

    def client_credentials(self) -> tuple:
        return self.config.tiktok_client_key, self.config.tiktok_client_secret

    def build_authorization_url(self, credentials: OAuthCredentials) -> str:
        params = {
            "client_key": credentials.client_id,
            "scope": ",".join(credentials.scopes),
            "response_type": "code",
            "redirect_uri": credentials.redirect_uri,
            "state": secrets.token_urlsafe(16),
        }
        return f"{self.settings['authorize_url']}?{urlencode(params, quote_via=quote, safe=',')}"

    async def exchange_code(self, code: str, credentials: OAuthCredentials) -> LinkedIdentity:
        """Exchange code for a TikTok access token, then fetch the user"""
        token_response = await self.client.post(
            self.settings["token_url"],
            data={
                "client_key": credentials.client_id,
                "client_secret": credentials.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": credentials.redirect_uri,
            }
        )
        token_data = self._json(token_response, "token exchange")
        if token_data.get("error") or not token_data.get("data"):
            raise self._fail("token", token_data, "Failed to get access token")

        data = token_data["data"]
        access_token = data.get("access_token")
        open_id = data.get("open_id")
        if not access_token or not open_id:
            raise self._fail("token", {}, "Failed to get access token")

        user_response = await self.client.get(
            self.settings["user_info_url"],
            params={"fields": "open_id,union_id,avatar_url,display_name"},
            headers={"Authorization": f"Bearer {access_token}"}
        )
        user_data = self._json(user_response, "user info")
        if user_data.get("error") or not user_data.get("data"):
            raise self._fail("identity", user_data, "Failed to get user info")

        user = user_data["data"].get("user") or {}
        metadata = {}
        if user.get("avatar_url"):
            metadata["avatar_url"] = user["avatar_url"]

        return LinkedIdentity(
            access_token=access_token,
            refresh_token=data.get("refresh_token"),
            token_expires_at=expires_at(data.get("expires_in")),
            account_name=user.get("display_name") or "TikTok User",
            account_identifier=open_id,
            metadata=metadata,
        )
