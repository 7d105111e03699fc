"""
YouTube Data API v3 publisher: resumable upload, search and metadata edit
"""

import json
from typing import Any, Dict, List, Optional

import httpx

from models.database import PlatformAccount
from utils.config import Config
from utils.exceptions import NotFoundError, PlatformError
from utils.http_client import get_async_client
from utils.platform_settings import get_platform_setting
from utils.structured_logging import get_structured_logger
from .base import BasePublisher, PublishRequest, PublishResult

logger = get_structured_logger(__name__)

DEFAULT_TITLE = "Uploaded video"
DEFAULT_DESCRIPTION = "Uploaded via social media manager"
CATEGORY_PEOPLE_AND_BLOGS = "22"
WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
SEARCH_MAX_RESULTS = 5


class YouTubePublisher(BasePublisher):
    """Publishes videos to the channel of a linked YouTube account"""

    def __init__(
        self,
        config: Config,
        client: Optional[httpx.AsyncClient] = None,
        media_client: Optional[httpx.AsyncClient] = None
    ):
        self.config = config
        self.client = client or get_async_client()
        # Media download and byte upload run without a timeout
        self.media_client = media_client or get_async_client(timeout=None)
        settings = get_platform_setting("youtube")
        self.token_url = settings["token_url"]
        self.api_base = settings["api_base_url"]
        self.upload_url = settings["upload_url"]

    @property
    def platform_name(self) -> str:
        return "youtube"

    def supports(self, content_type: Optional[str]) -> bool:
        return bool(content_type) and content_type.startswith("video/")

    @property
    def supports_edit(self) -> bool:
        return True

    async def refresh_access_token(self, account: PlatformAccount) -> str:
        """Opportunistic refresh_token grant; falls back to the stored token"""
        if not account.refresh_token:
            return account.access_token
        try:
            response = await self.client.post(
                self.token_url,
                data={
                    "client_id": self.config.youtube_client_id or "",
                    "client_secret": self.config.youtube_client_secret or "",
                    "refresh_token": account.refresh_token,
                    "grant_type": "refresh_token",
                }
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Token refresh failed", platform="youtube", account_id=str(account.id), error=str(e))
            return account.access_token

        if isinstance(data, dict) and data.get("access_token"):
            logger.debug("Refreshed access token", platform="youtube", account_id=str(account.id))
            return data["access_token"]

        logger.warning("Token refresh rejected", platform="youtube", account_id=str(account.id), response=data)
        return account.access_token

    async def publish(self, account: PlatformAccount, request: PublishRequest) -> PublishResult:
        """Download the stored media and push it through a resumable upload session"""
        if not account.access_token:
            raise PlatformError("Missing access token", {"platform": "youtube"})
        if not request.media_url:
            raise PlatformError("Missing media URL", {"platform": "youtube"})

        media_response = await self.media_client.get(request.media_url)
        if not media_response.is_success:
            raise PlatformError(
                f"Failed to download media: {media_response.reason_phrase}",
                {"platform": "youtube", "status": media_response.status_code}
            )
        content_type = media_response.headers.get("content-type") or "video/mp4"
        media_data = media_response.content
        logger.info(
            "Downloaded media file",
            platform="youtube",
            account_id=str(account.id),
            size_mb=round(len(media_data) / 1024 / 1024, 2)
        )

        access_token = await self.refresh_access_token(account)

        metadata = {
            "snippet": {
                "title": request.title or DEFAULT_TITLE,
                "description": request.description or DEFAULT_DESCRIPTION,
                "categoryId": CATEGORY_PEOPLE_AND_BLOGS,
            },
            "status": {
                "privacyStatus": "public",
            },
        }

        init_response = await self.client.post(
            self.upload_url,
            params={"part": "snippet,status", "uploadType": "resumable"},
            headers={
                "Authorization": f"Bearer {access_token}",
                "Content-Type": "application/json",
                "X-Upload-Content-Type": content_type,
                "X-Upload-Content-Length": str(len(media_data)),
            },
            content=json.dumps(metadata)
        )
        if not init_response.is_success:
            raise PlatformError(
                f"YouTube upload initialization failed: {init_response.text}",
                {"platform": "youtube", "status": init_response.status_code}
            )

        location = init_response.headers.get("Location")
        if not location:
            raise PlatformError("No upload URL provided by YouTube", {"platform": "youtube"})

        upload_response = await self.media_client.put(
            location,
            headers={
                "Content-Type": content_type,
                "Content-Length": str(len(media_data)),
            },
            content=media_data
        )
        if not upload_response.is_success:
            raise PlatformError(
                f"YouTube upload failed: {upload_response.text}",
                {"platform": "youtube", "status": upload_response.status_code}
            )

        video_id = upload_response.json().get("id")
        if not video_id:
            raise PlatformError("YouTube did not return a video id", {"platform": "youtube"})
        logger.info("Upload successful", platform="youtube", account_id=str(account.id), video_id=video_id)
        return PublishResult(
            success=True,
            external_id=video_id,
            url=WATCH_URL.format(video_id=video_id)
        )

    async def search(self, account: PlatformAccount, query: Optional[str] = None) -> List[Dict[str, Any]]:
        """Keyword search over the account's own channel"""
        if not account.access_token:
            raise PlatformError("Missing access token", {"platform": "youtube"})

        access_token = await self.refresh_access_token(account)
        params = {"part": "snippet", "maxResults": str(SEARCH_MAX_RESULTS), "type": "video"}
        if query:
            params["q"] = query
        if account.account_identifier:
            params["channelId"] = account.account_identifier

        response = await self.client.get(
            f"{self.api_base}/search",
            params=params,
            headers={"Authorization": f"Bearer {access_token}"}
        )
        if not response.is_success:
            raise PlatformError(
                f"YouTube search failed: {response.text}",
                {"platform": "youtube", "status": response.status_code}
            )

        items = response.json().get("items") or []
        logger.debug("Search completed", platform="youtube", query=query, found=len(items))
        return items

    async def find_existing(self, account: PlatformAccount, title: str) -> Optional[str]:
        """Video id of the search hit whose title matches exactly"""
        for item in await self.search(account, title):
            snippet_title = (item.get("snippet") or {}).get("title") or ""
            if snippet_title.strip().lower() == title.strip().lower():
                return (item.get("id") or {}).get("videoId")
        return None

    async def update(
        self,
        account: PlatformAccount,
        external_id: str,
        title: Optional[str] = None,
        description: Optional[str] = None
    ) -> PublishResult:
        """Update title/description, preserving the other snippet fields"""
        if not account.access_token:
            raise PlatformError("Missing access token", {"platform": "youtube"})
        if not external_id:
            raise PlatformError("Missing video ID", {"platform": "youtube"})

        access_token = await self.refresh_access_token(account)
        headers = {"Authorization": f"Bearer {access_token}"}

        get_response = await self.client.get(
            f"{self.api_base}/videos",
            params={"part": "snippet", "id": external_id},
            headers=headers
        )
        if not get_response.is_success:
            raise PlatformError(
                f"Failed to get video data: {get_response.text}",
                {"platform": "youtube", "status": get_response.status_code}
            )

        items = get_response.json().get("items") or []
        if not items:
            raise NotFoundError("Video not found", {"platform": "youtube", "video_id": external_id})

        snippet = dict(items[0].get("snippet") or {})
        if title:
            snippet["title"] = title
        if description:
            snippet["description"] = description

        update_response = await self.client.put(
            f"{self.api_base}/videos",
            params={"part": "snippet"},
            headers={**headers, "Content-Type": "application/json"},
            content=json.dumps({"id": external_id, "snippet": snippet})
        )
        if not update_response.is_success:
            raise PlatformError(
                f"YouTube video update failed: {update_response.text}",
                {"platform": "youtube", "status": update_response.status_code}
            )

        updated_id = update_response.json().get("id") or external_id
        logger.info("Video updated", platform="youtube", account_id=str(account.id), video_id=updated_id)
        return PublishResult(success=True, external_id=updated_id, url=WATCH_URL.format(video_id=updated_id))
