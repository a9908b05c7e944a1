"""큐 클라이언트 모델"""
from broker.model.config import SqsConfig
from broker.model.message import Message, RECEIVE_COUNT_ATTRIBUTE

__all__ = ["SqsConfig", "Message", "RECEIVE_COUNT_ATTRIBUTE"]
