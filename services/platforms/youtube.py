"""
YouTube (Google OAuth2) account linking
"""

from urllib.parse import urlencode, quote

from .base import BaseOAuthBridge, LinkedIdentity, OAuthCredentials, expires_at


class YouTubeBridge(BaseOAuthBridge):
    """Google OAuth2 consent for a YouTube channel"""

    @property
    def platform_name(self) -> str:
        return "youtube"

    def client_credentials(self) -> tuple:
        return self.config.youtube_client_id, self.config.youtube_client_secret

    def build_authorization_url(self, credentials: OAuthCredentials) -> str:
        params = {
            "client_id": credentials.client_id,
            "redirect_uri": credentials.redirect_uri,
            "response_type": "code",
            "scope": " ".join(credentials.scopes),
            "access_type": "offline",
            "prompt": "consent",
        }
        return f"{self.settings['authorize_url']}?{urlencode(params, quote_via=quote)}"

    async def exchange_code(self, code: str, credentials: OAuthCredentials) -> LinkedIdentity:
        """Exchange Google OAuth2 code for tokens, then look up the channel"""
        token_response = await self.client.post(
            self.settings["token_url"],
            data={
                "code": code,
                "client_id": credentials.client_id,
                "client_secret": credentials.client_secret,
                "redirect_uri": credentials.redirect_uri,
                "grant_type": "authorization_code",
            }
        )
        tokens = self._json(token_response, "token exchange")
        if tokens.get("error") or not tokens.get("access_token"):
            raise self._fail("token", tokens, "Failed to exchange code")

        access_token = tokens["access_token"]
        channel_response = await self.client.get(
            f"{self.settings['api_base_url']}/channels",
            params={"part": "snippet", "mine": "true"},
            headers={"Authorization": f"Bearer {access_token}"}
        )
        channel_data = self._json(channel_response, "channel lookup")
        if channel_data.get("error"):
            raise self._fail("identity", channel_data, "Failed to get channel info")

        items = channel_data.get("items") or []
        if not items:
            raise self._fail("identity", {}, "No YouTube channel found for this account")

        channel = items[0]
        return LinkedIdentity(
            access_token=access_token,
            refresh_token=tokens.get("refresh_token"),
            token_expires_at=expires_at(tokens.get("expires_in")),
            account_name=channel.get("snippet", {}).get("title") or "YouTube Channel",
            account_identifier=channel["id"],
        )
