# ============================================================================
# FILE: slotbook/api/v1/dashboard/google_integration.py
# Google Calendar connect flow - thin HTTP layer
# IMPORTANT: Specific routes MUST come before parameterized routes
# ============================================================================
import json
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse

from slotbook.api.dependencies import get_current_user, get_google_calendar_service
from slotbook.config.redis import RedisKeys, get_redis
from slotbook.models.user import User
from slotbook.schemas.calendar import (
    AuthorizationUrlResponse,
    BusyCalendarSelection,
    BusyIntervalResponse,
    BusyIntervalsRequest,
    IntegrationStatusResponse,
    LiveCalendarEntry,
)
from slotbook.services.calendar.google_calendar_service import GoogleCalendarService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Integrations"])

CALLBACK_PAGE = """
<html>
    <head><title>Google Calendar connected</title></head>
    <body style="font-family: sans-serif; text-align: center; padding-top: 4rem;">
        <h1>Google Calendar connected</h1>
        <p>You can close this window and return to your dashboard.</p>
        <script>setTimeout(function () { window.close(); }, 1500);</script>
    </body>
</html>
"""


# ========== HELPER FUNCTIONS FOR REDIS ==========

async def store_oauth_callback(user_id: str, data: dict):
    """Store OAuth callback data in Redis with 5 minute expiration"""
    redis_client = await get_redis()
    await redis_client.setex(
        RedisKeys.OAUTH_CALLBACK.format(user_id=user_id),
        RedisKeys.OAUTH_CALLBACK_TTL,
        json.dumps(data)
    )


async def get_oauth_callback(user_id: str) -> Optional[dict]:
    """Retrieve OAuth callback data from Redis"""
    redis_client = await get_redis()
    data = await redis_client.get(RedisKeys.OAUTH_CALLBACK.format(user_id=user_id))

    if data:
        return json.loads(data)
    return None


async def delete_oauth_callback(user_id: str):
    redis_client = await get_redis()
    await redis_client.delete(RedisKeys.OAUTH_CALLBACK.format(user_id=user_id))


# ========== GOOGLE CALENDAR ==========

@router.post("/authorize", response_model=AuthorizationUrlResponse)
async def initiate_google_auth(
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    """Returns the authorization URL for the signed-in user to visit."""
    return {"authorization_url": service.generate_authorization_url(current_user.id)}


@router.get("/callback", response_class=HTMLResponse)
async def google_callback(
        code: str,
        state: str,  # user_id
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    """
    Google redirects here after authorization.
    This endpoint does NOT require authentication as it's a callback from Google.
    """
    integration = service.handle_oauth_callback(code, state)

    try:
        await store_oauth_callback(state, {
            'integration_id': str(integration.id),
            'calendars': integration.provider_config['calendar_list'],
            'provider': 'google'
        })
    except Exception as e:
        # The integration is stored; the dashboard can still read /status
        logger.warning(f"Could not publish OAuth callback for user {state}: {e}")

    return HTMLResponse(content=CALLBACK_PAGE)


@router.get("/callback-status")
async def google_callback_status(current_user: User = Depends(get_current_user)):
    """Polled by the dashboard after opening the consent popup"""
    data = await get_oauth_callback(str(current_user.id))
    if not data:
        return {"completed": False}

    await delete_oauth_callback(str(current_user.id))
    return {"completed": True, **data}


@router.get("/status", response_model=IntegrationStatusResponse)
async def google_status(
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    return service.get_integration_status(current_user.id)


@router.get("/calendars", response_model=List[LiveCalendarEntry])
async def list_google_calendars(
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    """Calendars on the connected Google account, fetched live"""
    return await service.list_calendars(current_user.id)


@router.put("/calendars")
async def select_busy_calendars(
        request: BusyCalendarSelection,
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    return service.select_busy_calendars(current_user.id, request.calendar_ids)


@router.post("/busy-slots", response_model=List[BusyIntervalResponse])
async def google_busy_slots(
        request: BusyIntervalsRequest,
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    """
    Busy times on the connected calendars. 400 for a reversed range or one
    longer than 90 days, 404 when Google Calendar is not connected.
    """
    intervals = await service.query_busy_intervals(
        current_user.id,
        request.start_date,
        request.end_date,
        request.calendar_ids
    )
    return [
        {
            "start": interval.start.isoformat(),
            "end": interval.end.isoformat(),
            "summary": interval.summary,
            "calendar_id": interval.calendar_id,
        }
        for interval in intervals
    ]


@router.delete("/disconnect")
async def disconnect_google(
        current_user: User = Depends(get_current_user),
        service: GoogleCalendarService = Depends(get_google_calendar_service)
):
    if not service.disconnect(current_user.id):
        raise HTTPException(status_code=404, detail="Google Calendar is not connected")
    return {"disconnected": True}
