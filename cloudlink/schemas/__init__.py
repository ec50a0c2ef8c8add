"""
CloudLink Schemas.

- object_data: envelope around stored objects
- push_notification: push notification and its target
"""

from cloudlink.schemas.object_data import ObjectData
from cloudlink.schemas.push_notification import (
    ExpirationType,
    Priority,
    PushNotification,
    Target,
    TargetType,
)

__all__ = [
    "ExpirationType",
    "ObjectData",
    "Priority",
    "PushNotification",
    "Target",
    "TargetType",
]
