from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


TierName = Literal["free", "plus", "pro", "pro_max"]
PaidTierName = Literal["plus", "pro", "pro_max"]
ReminderName = Literal["daily", "weekly"]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )


# Requests


class PromoValidateRequest(ApiModel):
    code: str = Field(min_length=1, max_length=50)
    user_id: int


class PromoCreateRequest(ApiModel):
    code: str = Field(min_length=1, max_length=50, pattern=r"^[A-Za-z0-9_-]+$")
    plan_type: TierName
    description: Optional[str] = Field(default=None, max_length=255)
    max_uses: Optional[int] = Field(default=None, gt=0)
    expires_at: Optional[datetime] = None


class CoachRequest(ApiModel):
    user_id: int
    relationship_status: Optional[str] = Field(default=None, max_length=20)
    first_name: Optional[str] = Field(default=None, max_length=100)
    topic: Optional[str] = Field(default=None, max_length=100)
    mood: Optional[str] = Field(default=None, max_length=100)


class ChatRequest(ApiModel):
    message: str = Field(min_length=1, max_length=4000)
    user_id: int
    context: Optional[dict] = None


class PreferenceUpdateRequest(ApiModel):
    user_id: int
    reminder_type: ReminderName
    enabled: bool
    time_preference: Optional[str] = Field(
        default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$"
    )


class PushTokenRequest(ApiModel):
    user_id: int
    push_token: str = Field(min_length=1, max_length=255)


class UserCreateRequest(ApiModel):
    email: str = Field(max_length=255, pattern=r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    first_name: str = Field(min_length=1, max_length=100)
    last_name: Optional[str] = Field(default=None, max_length=100)
    relationship_status: Optional[str] = Field(default=None, max_length=20)


class ActivityLogRequest(ApiModel):
    user_id: int
    action_type: str = Field(min_length=1, max_length=50)
    value: int = Field(default=1, gt=0)
    details: Optional[dict] = Field(default=None, alias="metadata")


class CheckoutRequest(ApiModel):
    user_id: int
    price_id: str = Field(min_length=1)
    plan_type: PaidTierName
    success_url: str = Field(min_length=1)
    cancel_url: str = Field(min_length=1)


# Responses


class PromoValidationOut(ApiModel):
    valid: bool
    plan_type: Optional[str] = None
    expires_at: Optional[datetime] = None
    message: str


class PromoAccessOut(ApiModel):
    has_access: bool
    plan_type: Optional[str] = None
    expires_at: Optional[datetime] = None


class PromoCodeOut(ApiModel):
    id: int
    code: str
    description: Optional[str] = None
    plan_type: str
    expires_at: Optional[datetime] = None
    max_uses: Optional[int] = None
    current_uses: int
    is_active: bool
    created_at: datetime


class CoachMessageOut(ApiModel):
    title: str
    body: str
    call_to_action: str
    session_id: int


class CoachSessionOut(ApiModel):
    id: int
    user_id: int
    message_title: str
    message_body: str
    call_to_action: Optional[str] = None
    user_context: Optional[dict] = None
    session_type: str
    created_at: datetime


class StreakOut(ApiModel):
    streak_type: str
    current_streak: int
    longest_streak: int
    last_activity_date: Optional[date] = None


class PreferenceOut(ApiModel):
    enabled: bool
    time_preference: Optional[str] = None
    push_token: Optional[str] = None


class EntitlementOut(ApiModel):
    subscription_tier: str
    promo_access: PromoAccessOut
    effective_tier: str
    tier_name: str
    is_premium: bool
    has_access: Optional[bool] = None
    upgrade_message: Optional[str] = None


class UserOut(ApiModel):
    id: int
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    relationship_status: Optional[str] = None
    subscription_tier: str
    created_at: datetime


class ActivityOut(ApiModel):
    id: int
    user_id: int
    activity_date: date = Field(serialization_alias="date")
    action_type: str
    value: int
    details: Optional[dict] = Field(default=None, serialization_alias="metadata")
    created_at: datetime


class EngagementOut(ApiModel):
    day: date = Field(serialization_alias="date")
    count: int


class ProgressOut(ApiModel):
    total_check_ins: int
    days_active: int
    current_streak: int
    longest_streak: int
    recent_activity: list[ActivityOut]
    weekly_engagement: list[EngagementOut]


class AuditLogOut(ApiModel):
    id: int
    action: str
    payload: dict
    created_at: datetime


class CheckoutOut(ApiModel):
    session_id: str
    url: str


def dump(model: BaseModel, exclude_none: bool = False) -> dict:
    return model.model_dump(mode="json", by_alias=True, exclude_none=exclude_none)
