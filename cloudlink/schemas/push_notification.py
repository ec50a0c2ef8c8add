"""
Push Notification Schemas.

Pydantic schemas for push notifications sent through CloudLink. Field
names are snake_case in Python and camelCase on the wire.
"""

import enum

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class Priority(str, enum.Enum):
    """Delivery priority."""

    NORMAL = "NORMAL"
    HIGH = "HIGH"


class ExpirationType(str, enum.Enum):
    """Unit of the expiration amount."""

    WEEKS = "WEEKS"
    DAYS = "DAYS"
    HOURS = "HOURS"
    MINUTES = "MINUTES"


class TargetType(str, enum.Enum):
    """Recipients of a push notification."""

    ALL_DEVICES = "ALL_DEVICES"
    SINGLE_DEVICE = "SINGLE_DEVICE"
    TOPIC = "TOPIC"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        validate_assignment=True,
        revalidate_instances="always",
        extra="ignore",
    )


class Target(_WireModel):
    """Recipients of a notification."""

    type: TargetType = Field(default=TargetType.ALL_DEVICES)
    topic: str | None = Field(default=None, max_length=255)
    device_token: str | None = Field(default=None)

    @model_validator(mode="after")
    def _check_recipient(self) -> "Target":
        if self.type is TargetType.SINGLE_DEVICE and not self.device_token:
            raise ValueError("device_token is required for target type SINGLE_DEVICE")
        if self.type is TargetType.TOPIC and not self.topic:
            raise ValueError("topic is required for target type TOPIC")
        return self


class PushNotification(_WireModel):
    """
    Push notification to deliver to mobile devices.

    identifier and creation_date are assigned by CloudLink and only set on
    the copy returned by CloudLinkClient.send_push_notification.
    """

    identifier: str | None = Field(default=None, description="Assigned by CloudLink")
    creation_date: int | None = Field(default=None, description="Epoch millis, assigned by CloudLink")

    custom_identifier: str | None = Field(default=None, max_length=255)
    title: str = Field(..., max_length=255, examples=["Maintenance tonight"])
    body: str = Field(..., max_length=2048, examples=["The service is offline from 2am to 3am."])
    delivery_date: int = Field(default=0, ge=0, description="Epoch millis, 0 delivers immediately")
    priority: Priority = Priority.NORMAL
    expiration_type: ExpirationType = ExpirationType.WEEKS
    expiration_amount: int = Field(default=4, ge=1)
    target: Target = Field(default_factory=Target)
    invisible: bool = False

    def to_form(self) -> dict[str, str]:
        """Form fields of the send request. Unset optional fields are omitted."""
        fields = {
            "customIdentifier": self.custom_identifier,
            "title": self.title,
            "body": self.body,
            "deliveryDate": str(self.delivery_date),
            "priority": self.priority.value,
            "expirationType": self.expiration_type.value,
            "expirationAmount": str(self.expiration_amount),
            "targetType": self.target.type.value,
            "targetTopic": self.target.topic,
            "targetDeviceToken": self.target.device_token,
            "invisible": "true" if self.invisible else "false",
        }
        return {key: value for key, value in fields.items() if value is not None}
