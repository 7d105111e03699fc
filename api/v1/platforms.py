"""
Platform account linking endpoints
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query

from api.dependencies import get_account_link_service, get_account_store, get_publisher_registry
from schemas.requests import OAuthCallbackRequest
from schemas.responses import AccountResponse, AuthorizationUrlResponse, LinkResponse, PlatformInfo
from services.platforms.account_linker import AccountLinkService
from services.platforms.account_store import AccountStore
from services.platforms.registry import bridge_registry
from services.publishers.registry import PublisherRegistry
from utils.auth import UserSession, get_current_session
from utils.error_codes import ErrorCode, ERROR_MESSAGES
from utils.exceptions import create_http_exception, handle_platform_error
from utils.platform_settings import get_platform_setting

router = APIRouter()


def _supported(platform: str) -> str:
    platform = platform.lower()
    if platform not in bridge_registry.list_platforms():
        raise create_http_exception(
            404,
            ERROR_MESSAGES[ErrorCode.PLATFORM_UNSUPPORTED],
            {"platform": platform, "code": ErrorCode.PLATFORM_UNSUPPORTED.value}
        )
    return platform


@router.get("", response_model=List[PlatformInfo])
async def list_platforms(
    publishers: PublisherRegistry = Depends(get_publisher_registry)
) -> List[PlatformInfo]:
    """List all supported platforms"""
    publishing = set(publishers.publishing_platforms())
    return [
        PlatformInfo(
            id=platform,
            name=get_platform_setting(platform).get("display_name", platform.title()),
            can_publish=platform in publishing
        )
        for platform in bridge_registry.list_platforms()
    ]


@router.get("/accounts", response_model=List[AccountResponse])
async def list_accounts(
    platform: Optional[str] = Query(None, description="Only accounts on this platform"),
    session: UserSession = Depends(get_current_session),
    store: AccountStore = Depends(get_account_store)
) -> List[AccountResponse]:
    """Accounts linked by the current user"""
    try:
        accounts = await store.list_for_user(session.user_id, platform.lower() if platform else None)
    except Exception as e:
        raise handle_platform_error(e, platform or "all")
    return [AccountResponse.from_account(account) for account in accounts]


@router.delete("/accounts/{account_id}")
async def disconnect_account(
    account_id: UUID,
    session: UserSession = Depends(get_current_session),
    service: AccountLinkService = Depends(get_account_link_service)
):
    """Disconnect a linked account"""
    try:
        await service.disconnect(session, account_id)
    except Exception as e:
        raise handle_platform_error(e, "account")
    return {"message": "Account disconnected successfully"}


@router.post("/{platform}/connect", response_model=AuthorizationUrlResponse)
async def connect_platform(
    platform: str,
    session: UserSession = Depends(get_current_session),
    service: AccountLinkService = Depends(get_account_link_service)
) -> AuthorizationUrlResponse:
    """Start the OAuth consent flow for a platform"""
    platform = _supported(platform)
    try:
        return AuthorizationUrlResponse(**await service.connect(platform))
    except Exception as e:
        raise handle_platform_error(e, platform)


@router.post("/{platform}/callback", response_model=LinkResponse)
async def complete_platform_link(
    platform: str,
    request: OAuthCallbackRequest,
    session: UserSession = Depends(get_current_session),
    service: AccountLinkService = Depends(get_account_link_service)
) -> LinkResponse:
    """Complete the link with the query parameters of the provider redirect"""
    platform = _supported(platform)
    try:
        account, created = await service.complete_link(
            session,
            platform,
            code=request.code,
            error=request.error,
            error_description=request.error_description or request.error_reason
        )
    except Exception as e:
        raise handle_platform_error(e, platform)
    return LinkResponse(account=AccountResponse.from_account(account), created=created)
