"""Queue adapters"""
from broker.adapter.base import BaseQueueAdapter
from broker.adapter.sqs import SqsAdapter

__all__ = ["BaseQueueAdapter", "SqsAdapter"]
