"""
Subscription billing endpoints (Stripe)
"""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from api.dependencies import get_billing_service
from schemas.requests import BillingRedirectRequest
from schemas.responses import RedirectUrlResponse, SubscriptionResponse
from services.billing import BillingService
from utils.auth import UserSession, get_current_session
from utils.config import Config, get_config
from utils.exceptions import handle_billing_error

router = APIRouter()


def _origin(request: Request, body: Optional[BillingRedirectRequest], config: Config) -> str:
    """Explicit origin, else the Origin header, else the configured public URL"""
    if body is not None and body.origin:
        return body.origin
    return request.headers.get("origin") or config.public_url


@router.get("/subscription", response_model=SubscriptionResponse)
async def check_subscription(
    session: UserSession = Depends(get_current_session),
    billing: BillingService = Depends(get_billing_service)
) -> SubscriptionResponse:
    """Refresh and return the user's subscription state"""
    try:
        status = await billing.check_subscription(session)
    except Exception as e:
        raise handle_billing_error(e)
    return SubscriptionResponse(**status.model_dump())


@router.post("/checkout", response_model=RedirectUrlResponse)
async def create_checkout(
    request: Request,
    body: Optional[BillingRedirectRequest] = None,
    session: UserSession = Depends(get_current_session),
    billing: BillingService = Depends(get_billing_service),
    config: Config = Depends(get_config)
) -> RedirectUrlResponse:
    """Stripe Checkout session for the monthly plan with a free trial"""
    try:
        result = await billing.create_checkout(session, _origin(request, body, config))
    except Exception as e:
        raise handle_billing_error(e)
    return RedirectUrlResponse(**result)


@router.post("/portal", response_model=RedirectUrlResponse)
async def customer_portal(
    request: Request,
    body: Optional[BillingRedirectRequest] = None,
    session: UserSession = Depends(get_current_session),
    billing: BillingService = Depends(get_billing_service),
    config: Config = Depends(get_config)
) -> RedirectUrlResponse:
    """Stripe customer portal session"""
    try:
        result = await billing.customer_portal(session, _origin(request, body, config))
    except Exception as e:
        raise handle_billing_error(e)
    return RedirectUrlResponse(**result)
