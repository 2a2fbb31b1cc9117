# slotbook/schemas/__init__.py
from .availability import (
    AvailabilityRuleCreate,
    AvailabilityBulkReplace,
    AvailabilityRuleResponse,
    AvailableSlot,
    EventTypeInfo,
    DayAvailabilityResponse
)

from .booking import (
    BookingCreate,
    BookingCancel,
    BookingFilter,
    BookingConfirmation,
    BookingResponse
)

from .calendar import (
    CalendarEntry,
    LiveCalendarEntry,
    BusyIntervalsRequest,
    BusyIntervalResponse,
    IntegrationStatusResponse,
    BusyCalendarSelection,
    AuthorizationUrlResponse
)

from .event_type import (
    MeetingLocation,
    EventTypeCreate,
    EventTypeUpdate,
    EventTypeResponse
)

from .user import (
    RegisterRequest,
    LoginRequest,
    ProfileUpdate,
    UserProfileResponse,
    TokenResponse,
    PublicEventTypeSummary,
    PublicProfileResponse,
    PublicAvailabilityWindow,
    PublicEventTypeDetails
)
