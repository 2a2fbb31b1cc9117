# slotbook/services/calendar/google_calendar_service.py
import asyncio
import logging
from datetime import timedelta, datetime, timezone
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar
from uuid import UUID

from google.auth.exceptions import RefreshError, TransportError
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from sqlalchemy.orm import Session

from slotbook.config.settings import Settings, get_settings
from slotbook.core.exceptions import GatewayDegradedError, NotFoundError, ValidationError
from slotbook.models import CalendarIntegration
from slotbook.services.calendar.gateway import (
    BusyInterval,
    BusyResult,
    CalendarGateway,
    NOT_CONNECTED,
)
from slotbook.utils.clock import to_naive_utc, utcnow
from slotbook.utils.encryption import TokenCipher

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Refresh when the access token has less than this left
TOKEN_REFRESH_MARGIN = timedelta(minutes=5)

# Widest range the owner-side busy lookup accepts
MAX_BUSY_RANGE = timedelta(days=90)


def to_rfc3339(value: datetime) -> str:
    """Naive datetimes are UTC throughout the system"""
    return to_naive_utc(value).isoformat() + "Z"


def parse_rfc3339(value: str) -> datetime:
    """Parse a Google timestamp into a naive UTC datetime"""
    return to_naive_utc(datetime.fromisoformat(value.replace("Z", "+00:00")))


def validate_busy_range(range_start: datetime, range_end: datetime) -> Tuple[datetime, datetime]:
    """Naive UTC bounds of an owner-side busy lookup; raises ValidationError"""
    start, end = to_naive_utc(range_start), to_naive_utc(range_end)

    if start >= end:
        raise ValidationError("Start date must be before end date")
    if end - start > MAX_BUSY_RANGE:
        raise ValidationError(f"Date range cannot exceed {MAX_BUSY_RANGE.days} days")

    return start, end


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


class GoogleCalendarService(CalendarGateway):
    SCOPES = [
        'https://www.googleapis.com/auth/calendar',
        'https://www.googleapis.com/auth/calendar.events',
    ]
    TOKEN_URI = 'https://oauth2.googleapis.com/token'

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.db = db
        self.settings = settings or get_settings()
        self.timeout = self.settings.CALENDAR_GATEWAY_TIMEOUT_SECONDS
        self._cipher: Optional[TokenCipher] = None

        # OAuth credentials from Google Cloud Console
        self.client_config = {
            "web": {
                "client_id": self.settings.GOOGLE_CLIENT_ID,
                "client_secret": self.settings.GOOGLE_CLIENT_SECRET,
                "redirect_uris": [self.settings.GOOGLE_REDIRECT_URI],
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": self.TOKEN_URI,
            }
        }

    @property
    def cipher(self) -> TokenCipher:
        if self._cipher is None:
            self._cipher = TokenCipher(self.settings)
        return self._cipher

    # ========== OAUTH CONNECT FLOW ==========

    def _flow(self) -> Flow:
        return Flow.from_client_config(
            self.client_config,
            scopes=self.SCOPES,
            redirect_uri=self.settings.GOOGLE_REDIRECT_URI
        )

    def generate_authorization_url(self, user_id: UUID) -> str:
        """Step 1: OAuth URL for the user to visit; state carries the user id"""
        if not self.settings.GOOGLE_CLIENT_ID or not self.settings.GOOGLE_REDIRECT_URI:
            raise GatewayDegradedError("Google Calendar integration is not configured")

        authorization_url, _ = self._flow().authorization_url(
            access_type='offline',  # Gets refresh token
            include_granted_scopes='true',
            prompt='consent',  # Force consent screen to get refresh token
            state=str(user_id)
        )
        logger.info(f"Generated Google authorization URL for user {user_id}")
        return authorization_url

    def handle_oauth_callback(self, code: str, state: str) -> CalendarIntegration:
        """Step 2: Exchange authorization code for tokens and store the link"""
        try:
            user_id = UUID(state)
        except ValueError:
            raise ValidationError("Invalid OAuth state")

        flow = self._flow()
        try:
            flow.fetch_token(code=code)
        except Exception as e:
            logger.error(f"Failed to exchange code for tokens for user {user_id}: {e}")
            raise GatewayDegradedError("Could not complete Google authorization")

        credentials = flow.credentials

        try:
            service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
            calendar_list = service.calendarList().list().execute()
        except (HttpError, TransportError) as e:
            logger.error(f"Failed to list calendars for user {user_id}: {e}")
            raise GatewayDegradedError("Could not read calendars from Google")

        calendars = calendar_list.get('items', [])
        primary = next((cal for cal in calendars if cal.get('primary')), None)

        integration = self.db.query(CalendarIntegration).filter_by(user_id=user_id).first()
        if integration is None:
            integration = CalendarIntegration(user_id=user_id, provider='google')
            self.db.add(integration)

        integration.is_active = True
        integration.access_token_encrypted = self.cipher.encrypt(credentials.token)
        # Google only returns a refresh token on first consent
        if credentials.refresh_token:
            integration.refresh_token_encrypted = self.cipher.encrypt(credentials.refresh_token)
        integration.token_expires_at = _as_aware(credentials.expiry or (utcnow() + timedelta(hours=1)))
        if primary:
            integration.account_email = primary.get('id')
            integration.calendar_id = primary.get('id')
        integration.calendar_id = integration.calendar_id or 'primary'
        integration.provider_config = {
            'calendar_list': [
                {'id': cal['id'], 'name': cal.get('summary', cal['id'])}
                for cal in calendars
            ],
            'busy_calendar_ids': [integration.calendar_id],
        }

        self.db.commit()
        self.db.refresh(integration)

        logger.info(f"Stored Google calendar integration {integration.id} for user {user_id}")
        return integration

    def get_integration_status(self, user_id: UUID) -> Dict:
        integration = self._active_integration(user_id)
        if integration is None:
            return {"is_connected": False}

        return {
            "is_connected": True,
            "account_email": integration.account_email,
            "calendar_id": integration.calendar_id,
            "calendars": (integration.provider_config or {}).get('calendar_list', []),
            "connected_at": integration.created_at.isoformat() if integration.created_at else None,
        }

    def select_busy_calendars(self, user_id: UUID, calendar_ids: List[str]) -> Dict:
        """Choose which of the user's calendars count as busy time"""
        integration = self._active_integration(user_id)
        if integration is None:
            raise NotFoundError("Google Calendar is not connected")

        known = {cal['id'] for cal in (integration.provider_config or {}).get('calendar_list', [])}
        unknown = [cid for cid in calendar_ids if known and cid not in known]
        if unknown:
            raise ValidationError(f"Unknown calendar id(s): {', '.join(unknown)}")

        config = dict(integration.provider_config or {})
        config['busy_calendar_ids'] = calendar_ids or [integration.calendar_id or 'primary']
        integration.provider_config = config
        self.db.commit()
        return {"busy_calendar_ids": config['busy_calendar_ids']}

    async def list_calendars(self, user_id: UUID) -> List[Dict]:
        """Live calendar list from Google; also refreshes the stored copy"""
        integration = self._active_integration(user_id)
        if integration is None:
            raise NotFoundError("Google Calendar is not connected")

        try:
            response = await self._call(
                integration,
                lambda service: service.calendarList().list().execute()
            )
        except asyncio.TimeoutError:
            logger.warning(f"Google calendar list timed out after {self.timeout}s for user {user_id}")
            raise GatewayDegradedError("Google Calendar did not respond in time")
        except (RefreshError, HttpError, TransportError, OSError) as e:
            logger.warning(f"Google calendar list failed for user {user_id}: {e}")
            raise GatewayDegradedError("Could not read calendars from Google")

        calendars = [
            {
                'id': cal['id'],
                'name': cal.get('summary', cal['id']),
                'primary': bool(cal.get('primary')),
            }
            for cal in response.get('items', [])
        ]

        config = dict(integration.provider_config or {})
        config['calendar_list'] = [{'id': cal['id'], 'name': cal['name']} for cal in calendars]
        integration.provider_config = config
        self.db.commit()

        return calendars

    async def query_busy_intervals(
            self,
            user_id: UUID,
            range_start: datetime,
            range_end: datetime,
            calendar_ids: Optional[Sequence[str]] = None
    ) -> List[BusyInterval]:
        """
        Owner-side busy lookup over an explicit range.

        Unlike get_busy_intervals this is an explicit request, so a missing
        link is NotFoundError and a provider failure is GatewayDegradedError.
        """
        start, end = validate_busy_range(range_start, range_end)

        if self._active_integration(user_id) is None:
            raise NotFoundError("Google Calendar is not connected")

        intervals = await self.get_busy_intervals(user_id, start, end, calendar_ids)
        if intervals is NOT_CONNECTED:
            raise GatewayDegradedError("Could not read busy times from Google")

        return intervals

    def disconnect(self, user_id: UUID) -> bool:
        integration = self.db.query(CalendarIntegration).filter_by(user_id=user_id).first()
        if integration is None:
            return False

        self.db.delete(integration)
        self.db.commit()
        logger.info(f"Disconnected Google calendar for user {user_id}")
        return True

    # ========== CREDENTIALS ==========

    def _active_integration(self, user_id: UUID) -> Optional[CalendarIntegration]:
        return self.db.query(CalendarIntegration).filter_by(
            user_id=user_id,
            provider='google',
            is_active=True
        ).first()

    def _build_credentials(self, integration: CalendarIntegration) -> Credentials:
        # google-auth compares expiry against naive UTC
        expiry = to_naive_utc(integration.token_expires_at)
        return Credentials(
            token=self.cipher.decrypt(integration.access_token_encrypted),
            refresh_token=self.cipher.decrypt(integration.refresh_token_encrypted),
            token_uri=self.TOKEN_URI,
            client_id=self.settings.GOOGLE_CLIENT_ID,
            client_secret=self.settings.GOOGLE_CLIENT_SECRET,
            scopes=self.SCOPES,
            expiry=expiry,
        )

    @staticmethod
    def _needs_refresh(credentials: Credentials) -> bool:
        if credentials.expiry is None:
            return False
        return credentials.expiry <= utcnow() + TOKEN_REFRESH_MARGIN

    def _store_refreshed_token(self, integration: CalendarIntegration, credentials: Credentials):
        integration.access_token_encrypted = self.cipher.encrypt(credentials.token)
        integration.token_expires_at = _as_aware(credentials.expiry)
        self.db.commit()
        logger.info(f"Refreshed Google access token for user {integration.user_id}")

    async def _call(self, integration: CalendarIntegration, operation: Callable[[object], T]) -> T:
        """Run a Calendar API operation off the event loop, bounded by the gateway timeout"""
        credentials = self._build_credentials(integration)
        original_token = credentials.token

        def run():
            if self._needs_refresh(credentials):
                credentials.refresh(Request())
            service = build('calendar', 'v3', credentials=credentials, cache_discovery=False)
            return operation(service)

        result = await asyncio.wait_for(asyncio.to_thread(run), timeout=self.timeout)

        if credentials.token != original_token:
            self._store_refreshed_token(integration, credentials)

        return result

    # ========== GATEWAY ==========

    async def is_connected(self, user_id: UUID) -> bool:
        return self._active_integration(user_id) is not None

    async def get_busy_intervals(
            self,
            user_id: UUID,
            range_start: datetime,
            range_end: datetime,
            calendar_ids: Optional[Sequence[str]] = None
    ) -> BusyResult:
        """Busy intervals from Google free/busy; degrades to NOT_CONNECTED on failure"""
        integration = self._active_integration(user_id)
        if integration is None:
            return NOT_CONNECTED

        ids = list(calendar_ids or (integration.provider_config or {}).get('busy_calendar_ids')
                   or [integration.calendar_id or 'primary'])
        body = {
            "timeMin": to_rfc3339(range_start),
            "timeMax": to_rfc3339(range_end),
            "items": [{"id": cid} for cid in ids],
        }

        try:
            response = await self._call(
                integration,
                lambda service: service.freebusy().query(body=body).execute()
            )
        except asyncio.TimeoutError:
            logger.warning(f"Google free/busy timed out after {self.timeout}s for user {user_id}")
            return NOT_CONNECTED
        except RefreshError as e:
            logger.warning(f"Google token refresh failed for user {user_id}: {e}")
            return NOT_CONNECTED
        except (HttpError, TransportError, OSError) as e:
            logger.warning(f"Google free/busy failed for user {user_id}: {e}")
            return NOT_CONNECTED

        intervals = []
        for calendar_id, data in response.get('calendars', {}).items():
            if data.get('errors'):
                logger.warning(f"Google free/busy errors for calendar {calendar_id}: {data['errors']}")
            for busy in data.get('busy', []):
                intervals.append(BusyInterval(
                    start=parse_rfc3339(busy['start']),
                    end=parse_rfc3339(busy['end']),
                    calendar_id=calendar_id,
                ))

        intervals.sort(key=lambda interval: interval.start)
        return intervals

    async def create_event(
            self,
            user_id: UUID,
            summary: str,
            description: str,
            location: Optional[str],
            start: datetime,
            end: datetime,
            attendee_email: str,
            attendee_name: str
    ) -> str:
        integration = self._active_integration(user_id)
        if integration is None:
            raise GatewayDegradedError("Google Calendar is not connected")

        event = {
            'summary': summary,
            'description': description,
            'start': {'dateTime': start.isoformat(), 'timeZone': 'UTC'},
            'end': {'dateTime': end.isoformat(), 'timeZone': 'UTC'},
            'attendees': [
                {
                    'email': attendee_email,
                    'displayName': attendee_name,
                    'responseStatus': 'accepted',
                }
            ],
            'reminders': {
                'useDefault': False,
                'overrides': [
                    {'method': 'email', 'minutes': 24 * 60},
                    {'method': 'popup', 'minutes': 30},
                ],
            },
        }
        if location:
            event['location'] = location

        calendar_id = integration.calendar_id or 'primary'
        created = await self._call(
            integration,
            lambda service: service.events().insert(
                calendarId=calendar_id,
                body=event,
                sendUpdates='all'
            ).execute()
        )

        logger.info(f"Created Google event {created['id']} on calendar {calendar_id} for user {user_id}")
        return created['id']
