"""
CloudLink Python SDK.

- client: CloudLinkClient, the typed facade over the REST API
- codec: payload (de)serialization
- core/: configuration, logging, exceptions
- http/: route binding and authentication
- schemas/: ObjectData envelope and push notification models
"""

from cloudlink.client import CloudLinkClient
from cloudlink.core.config import CloudLinkClientConfig
from cloudlink.core.exceptions import (
    CloudLinkClientError,
    CloudLinkError,
    ConfigurationError,
    InvalidArgumentError,
    NotificationValidationError,
)
from cloudlink.schemas import (
    ExpirationType,
    ObjectData,
    Priority,
    PushNotification,
    Target,
    TargetType,
)

__version__ = "1.0.0"

__all__ = [
    "CloudLinkClient",
    "CloudLinkClientConfig",
    "CloudLinkClientError",
    "CloudLinkError",
    "ConfigurationError",
    "ExpirationType",
    "InvalidArgumentError",
    "NotificationValidationError",
    "ObjectData",
    "Priority",
    "PushNotification",
    "Target",
    "TargetType",
]
