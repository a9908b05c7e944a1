"""큐 클라이언트 패키지 (SQS / ElasticMQ)"""
from broker.adapter.base import BaseQueueAdapter
from broker.adapter.sqs import SqsAdapter
from broker.exception import (
    AttributeParseError,
    BrokerError,
    QueueConnectionError,
    QueueTransportError,
)
from broker.model.message import Message, RECEIVE_COUNT_ATTRIBUTE
from broker.model.config import SqsConfig

__all__ = [
    "BaseQueueAdapter",
    "SqsAdapter",
    "AttributeParseError",
    "BrokerError",
    "QueueConnectionError",
    "QueueTransportError",
    "Message",
    "RECEIVE_COUNT_ATTRIBUTE",
    "SqsConfig",
]
