"""Google Cloud Pub/Sub streaming-pull transport."""

from __future__ import annotations

from typing import Callable, Optional

from google.cloud import pubsub_v1
from loguru import logger

from gmailrelay.application.ports.push_transport import PushMessage, PushTransport


class PubSubPushTransport(PushTransport):
    """Deliver Pub/Sub messages to a callback on the client's thread pool."""

    def __init__(
        self,
        subscriber: Optional[pubsub_v1.SubscriberClient] = None,
        service_account_path: Optional[str] = None,
        max_messages: int = 10,
    ) -> None:
        if subscriber is None:
            if service_account_path:
                subscriber = pubsub_v1.SubscriberClient.from_service_account_file(service_account_path)
            else:
                subscriber = pubsub_v1.SubscriberClient()
        self.subscriber = subscriber
        self.flow_control = pubsub_v1.types.FlowControl(max_messages=max_messages)

    def subscribe(self, subscription: str, callback: Callable[[PushMessage], None]):
        logger.info(f"Opening streaming pull on {subscription}")
        return self.subscriber.subscribe(
            subscription,
            callback=callback,
            flow_control=self.flow_control,
        )

    def close(self) -> None:
        self.subscriber.close()
