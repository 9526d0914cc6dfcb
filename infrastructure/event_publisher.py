"""
Upload Event Publisher.

Sends FileUploaded events to an Azure Service Bus topic. Downstream
subscribers (the data-processing pipeline) pick them up from their own
subscriptions.

Publication is fire-and-forget from the pipeline's point of view: no retry,
no outbox. A failure is logged and raised as TransportError so the caller
can decide whether the upload still counts as successful.

Exports:
    IEventPublisher: Interface for dependency injection
    ServiceBusEventPublisher: azure.servicebus.aio implementation
"""

from abc import ABC, abstractmethod
from typing import List

from azure.core.exceptions import AzureError
from azure.identity.aio import DefaultAzureCredential
from azure.servicebus import ServiceBusMessage
from azure.servicebus.aio import ServiceBusClient

from config import EventConfig
from core.models import OperationResult, PublishAck, UploadEvent
from exceptions import ConfigurationError, TransportError
from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "ServiceBusEventPublisher")

PROVIDER = "service_bus"


class IEventPublisher(ABC):
    """Interface for upload event publication."""

    @abstractmethod
    async def publish(self, event: UploadEvent) -> OperationResult[PublishAck]:
        pass

    @abstractmethod
    async def publish_batch(self, events: List[UploadEvent]) -> OperationResult[PublishAck]:
        pass

    async def close(self) -> None:
        pass


def _to_message(event: UploadEvent) -> ServiceBusMessage:
    return ServiceBusMessage(
        body=event.to_wire(),
        content_type="application/json",
        subject=event.subject,
        message_id=event.id,
        application_properties={
            "eventType": event.event_type,
            "dataVersion": event.data_version,
        },
    )


class ServiceBusEventPublisher(IEventPublisher):
    """
    Publishes upload events to a Service Bus topic.

    The client is long-lived and shared across invocations; each publish
    opens a topic sender, sends one batch and closes the sender.
    """

    def __init__(self, client: ServiceBusClient, topic_name: str):
        self.client = client
        self.topic_name = topic_name

    @classmethod
    def from_config(cls, config: EventConfig) -> "ServiceBusEventPublisher":
        """
        Build the client from configuration.

        Connection string wins over namespace + DefaultAzureCredential.
        """
        if config.connection_string:
            logger.info("Initializing ServiceBusEventPublisher with connection string")
            client = ServiceBusClient.from_connection_string(config.connection_string)
        elif config.namespace:
            logger.info(f"Initializing ServiceBusEventPublisher with DefaultAzureCredential for {config.namespace}")
            client = ServiceBusClient(
                fully_qualified_namespace=config.namespace,
                credential=DefaultAzureCredential()
            )
        else:
            raise ConfigurationError(
                "Event topic not configured: set EVENT_TOPIC_CONNECTION_STRING or EVENT_TOPIC_NAMESPACE"
            )
        return cls(client, config.topic_name)

    async def publish(self, event: UploadEvent) -> OperationResult[PublishAck]:
        """
        Publish one event.

        Raises:
            TransportError: Service Bus rejected or could not be reached
        """
        return await self.publish_batch([event])

    async def publish_batch(self, events: List[UploadEvent]) -> OperationResult[PublishAck]:
        """
        Publish events in a single Service Bus batch.

        Returns:
            fail(...) if the events do not fit in one batch, ok(PublishAck)
            otherwise

        Raises:
            TransportError: Service Bus rejected or could not be reached
        """
        if not events:
            return OperationResult.ok(PublishAck(topic=self.topic_name, message_count=0), "Nothing to publish")

        try:
            async with self.client.get_topic_sender(topic_name=self.topic_name) as sender:
                batch = await sender.create_message_batch()
                for added, event in enumerate(events):
                    try:
                        batch.add_message(_to_message(event))
                    except ValueError:
                        logger.error(
                            f"Event {event.id} does not fit in a Service Bus batch "
                            f"({added} already added)"
                        )
                        return OperationResult.fail("Event batch exceeds Service Bus size limit")
                await sender.send_messages(batch)
        except AzureError as e:
            logger.error(
                f"❌ Failed to publish {len(events)} event(s) to topic {self.topic_name}: {e}",
                extra={'custom_dimensions': {
                    'topic': self.topic_name,
                    'event_ids': [event.id for event in events],
                    'error_type': type(e).__name__,
                }}
            )
            raise TransportError(
                f"Failed to publish to topic {self.topic_name}",
                provider=PROVIDER,
                error_code=type(e).__name__
            ) from e

        ack = PublishAck(
            topic=self.topic_name,
            message_count=len(events),
            message_ids=[event.id for event in events],
        )
        logger.info(f"✅ Published {len(events)} event(s) to topic {self.topic_name}")
        return OperationResult.ok(ack, "Event published")

    async def close(self) -> None:
        await self.client.close()


__all__ = ['IEventPublisher', 'ServiceBusEventPublisher']
