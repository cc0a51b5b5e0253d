"""Pub/Sub push transport."""

from gmailrelay.infrastructure.pubsub.subscriber import PubSubPushTransport

__all__ = ["PubSubPushTransport"]
