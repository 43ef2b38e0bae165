"""Routes for push-token registration and notification preferences."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from brick_deals.api.dependencies import GatewayDependency, RegistryDependency
from brick_deals.api.security import ApiKeyRequired, rate_limited
from brick_deals.errors import BrickDealsError, NotFoundError, ValidationError
from brick_deals.models.notification import NotificationData, PushNotification
from brick_deals.models.subscriber import (
    OperationResponse,
    RegisterTokenRequest,
    TokenRequest,
    UpdatePreferencesRequest,
)
from brick_deals.services.storage.subscriber_registry import INVALID_TOKEN_MESSAGE
from brick_deals.validation import is_valid_push_token

logger = logging.getLogger(__name__)

router = APIRouter(tags=["push"])

TEST_NOTIFICATION = PushNotification(
    title="Test Notification",
    body="Brick Deal Hunter notifications are working!",
    data=NotificationData(type="deal", set_number="TEST-1", retailer="test", percent_off=50),
)


@router.post(
    "/registerPushToken",
    response_model=OperationResponse,
    dependencies=[rate_limited("registerPushToken")],
    summary="Register or refresh a push token and its preferences",
)
async def register_push_token(
    payload: RegisterTokenRequest,
    registry: RegistryDependency,
) -> OperationResponse:
    try:
        await registry.register(payload.token, payload.platform, payload.preferences)
    except BrickDealsError:
        raise
    except Exception:
        logger.exception("Failed to register push token")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed",
        )
    return OperationResponse(message="Push token registered successfully")


@router.post(
    "/updateNotificationPreferences",
    response_model=OperationResponse,
    dependencies=[rate_limited("updateNotificationPreferences")],
    summary="Update preferences of an already registered token",
)
async def update_notification_preferences(
    payload: UpdatePreferencesRequest,
    registry: RegistryDependency,
) -> OperationResponse:
    try:
        await registry.update_preferences(payload.token, payload.preferences)
    except BrickDealsError:
        raise
    except Exception:
        logger.exception("Failed to update preferences")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Update failed",
        )
    return OperationResponse(message="Preferences updated successfully")


@router.post(
    "/unregisterPushToken",
    response_model=OperationResponse,
    dependencies=[rate_limited("unregisterPushToken")],
    summary="Remove a push token; unknown tokens are not an error",
)
async def unregister_push_token(
    payload: TokenRequest,
    registry: RegistryDependency,
) -> OperationResponse:
    try:
        await registry.unregister(payload.token)
    except BrickDealsError:
        raise
    except Exception:
        logger.exception("Failed to unregister push token")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unregistration failed",
        )
    return OperationResponse(message="Push token unregistered successfully")


@router.post(
    "/sendTestNotification",
    response_model=OperationResponse,
    dependencies=[ApiKeyRequired, rate_limited("sendTestNotification")],
    summary="Send a fixed test push to one registered token",
)
async def send_test_notification(
    payload: TokenRequest,
    registry: RegistryDependency,
    gateway: GatewayDependency,
) -> OperationResponse:
    if not is_valid_push_token(payload.token):
        raise ValidationError(INVALID_TOKEN_MESSAGE)

    try:
        if await registry.get(payload.token) is None:
            raise NotFoundError("Token not registered")
        await gateway.send([payload.token], TEST_NOTIFICATION)
    except BrickDealsError:
        raise
    except Exception:
        logger.exception("Failed to send test notification")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to send notification",
        )
    return OperationResponse(message="Test notification sent")
