"""
CloudLink Client.

Typed Python surface for the CloudLink REST API: key/value objects,
ordered lists of objects and push notifications.

Every method validates its arguments, performs exactly one blocking HTTP
request and converts the answer into a domain object. Lookups of objects
that do not exist return None instead of raising.

Usage:
    config = CloudLinkClientConfig(hostname="cloud.gluonhq.com", server_key="...")
    with CloudLinkClient(config) as client:
        client.add_object("motd", "Hello")
        client.get_object("motd", str)            # "Hello"
        client.get_object("settings", Settings)    # pydantic model or None
        client.get_list("scores", lambda data: int(data.payload))
"""

from typing import Any, TypeVar

import httpx
from pydantic import ValidationError

from cloudlink import codec
from cloudlink.codec import Decoder
from cloudlink.core.config import CloudLinkClientConfig
from cloudlink.core.exceptions import (
    InvalidArgumentError,
    NotificationValidationError,
    require,
    require_not_none,
)
from cloudlink.core.logging import get_logger, log_with_source
from cloudlink.http.binding import CloudLinkBinding
from cloudlink.schemas.object_data import ObjectData
from cloudlink.schemas.push_notification import PushNotification

logger = get_logger(__name__)

T = TypeVar("T")


class CloudLinkClient:
    """
    Client for the CloudLink REST API.

    A decoder argument is either a callable taking the ObjectData envelope
    or a type the JSON payload is validated against. For add and update
    operations the decoder defaults to the type of the target.

    Raises (all methods):
        InvalidArgumentError: A required argument is None or empty
        CloudLinkClientError: CloudLink returned a non-2xx status
        httpx.HTTPError: The request could not be sent
    """

    def __init__(
        self,
        config: CloudLinkClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            config: Client configuration
            transport: Optional httpx transport, replaces the network in tests
        """
        require(config, "config")
        self.config = config
        self._binding = CloudLinkBinding(config, transport=transport)

    def __enter__(self) -> "CloudLinkClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP connection pool."""
        self._binding.close()

    # -------------------------------------------------------------------------
    # Push notifications
    # -------------------------------------------------------------------------

    def send_push_notification(self, notification: PushNotification) -> PushNotification:
        """
        Send a push notification.

        Args:
            notification: The notification to send

        Returns:
            The sent notification, with identifier and creation date set

        Raises:
            NotificationValidationError: The notification fails its constraints
        """
        require(notification, "notification")
        if not isinstance(notification, PushNotification):
            raise InvalidArgumentError(
                f"notification must be a PushNotification, got {type(notification).__name__}"
            )
        try:
            valid = PushNotification.model_validate(notification)
        except ValidationError as e:
            raise NotificationValidationError(
                f"Invalid push notification: {e.error_count()} constraint violation(s)",
                details=e.errors(include_url=False),
            ) from e

        sent = self._binding.send_push_notification(valid)
        log_with_source(
            logger,
            "sdk",
            "debug",
            "Push notification sent",
            identifier=sent.identifier,
            target_type=valid.target.type.value,
        )
        return sent

    # -------------------------------------------------------------------------
    # Objects
    # -------------------------------------------------------------------------

    def get_object(self, object_id: str, decoder: Decoder[T]) -> T | None:
        """
        Retrieve the object with the given identifier.

        Args:
            object_id: Identifier of the object
            decoder: Mapping function or payload type

        Returns:
            The decoded object, or None if no such object exists
        """
        require(object_id, "object_id")
        require(decoder, "decoder")

        return self._decode_existing(self._binding.get_object(object_id), decoder)

    def add_object(self, object_id: str, target: T, decoder: Decoder[T] | None = None) -> T:
        """
        Store an object, overwriting any existing object with that identifier.

        Args:
            object_id: Identifier of the object
            target: Object to store
            decoder: Mapping function or payload type, defaults to type(target)

        Returns:
            The stored object as returned by CloudLink
        """
        require(object_id, "object_id")
        require_not_none(target, "target")

        envelope = self._binding.add_object(object_id, codec.encode(target))
        return codec.decode(envelope, self._resolve(target, decoder))

    def update_object(self, object_id: str, target: T, decoder: Decoder[T] | None = None) -> T | None:
        """
        Update an existing object. Nothing is created when it does not exist.

        Args:
            object_id: Identifier of the object
            target: New value of the object
            decoder: Mapping function or payload type, defaults to type(target)

        Returns:
            The updated object, or None if no such object exists
        """
        require(object_id, "object_id")
        require_not_none(target, "target")

        envelope = self._binding.update_object(object_id, codec.encode(target))
        return self._decode_existing(envelope, self._resolve(target, decoder))

    def remove_object(self, object_id: str) -> None:
        """Remove the object with the given identifier. Missing objects are not reported."""
        require(object_id, "object_id")

        self._binding.remove_object(object_id)

    # -------------------------------------------------------------------------
    # Lists
    # -------------------------------------------------------------------------

    def get_list(self, list_id: str, decoder: Decoder[T]) -> list[T]:
        """
        Retrieve the objects of a list, in the order CloudLink returns them.

        Args:
            list_id: Identifier of the list
            decoder: Mapping function or payload type applied to each element

        Returns:
            Decoded objects; empty when the list is empty or unknown
        """
        require(list_id, "list_id")
        require(decoder, "decoder")

        return [codec.decode(envelope, decoder) for envelope in self._binding.get_list(list_id)]

    def add_to_list(self, list_id: str, object_id: str, target: T, decoder: Decoder[T] | None = None) -> T:
        """
        Add an object to a list.

        Returns:
            The added object as returned by CloudLink
        """
        require(list_id, "list_id")
        require(object_id, "object_id")
        require_not_none(target, "target")

        envelope = self._binding.add_to_list(list_id, object_id, codec.encode(target))
        return codec.decode(envelope, self._resolve(target, decoder))

    def update_in_list(
        self,
        list_id: str,
        object_id: str,
        target: T,
        decoder: Decoder[T] | None = None,
    ) -> T | None:
        """
        Update an object that is already in a list.

        Returns:
            The updated object, or None if the list holds no such object
        """
        require(list_id, "list_id")
        require(object_id, "object_id")
        require_not_none(target, "target")

        envelope = self._binding.update_in_list(list_id, object_id, codec.encode(target))
        return self._decode_existing(envelope, self._resolve(target, decoder))

    def remove_from_list(self, list_id: str, object_id: str) -> None:
        """Remove an object from a list."""
        require(list_id, "list_id")
        require(object_id, "object_id")

        self._binding.remove_from_list(list_id, object_id)

    @staticmethod
    def _resolve(target: Any, decoder: Decoder[T] | None) -> Decoder[T]:
        return decoder if decoder is not None else type(target)

    @staticmethod
    def _decode_existing(envelope: ObjectData, decoder: Decoder[T]) -> T | None:
        if not envelope.exists:
            return None
        return codec.decode(envelope, decoder)
