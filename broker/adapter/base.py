"""Queue Adapter 기본 인터페이스"""
from abc import ABC, abstractmethod

from broker.model.message import Message


class BaseQueueAdapter(ABC):
    """
    큐 어댑터 기본 클래스

    SQS 및 SQS 호환 큐(ElasticMQ 등)에 대한 공통 인터페이스를 정의합니다.
    구현체는 여러 워커가 동시에 사용해도 안전해야 합니다.
    """

    @abstractmethod
    async def connect(self) -> None:
        """큐 연결"""
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """큐 연결 해제"""
        ...

    @abstractmethod
    async def receive(self, wait_seconds: int, visibility_timeout: int) -> Message | None:
        """
        메시지 1건 수신 (long poll)

        Args:
            wait_seconds: 메시지가 없을 때 최대 대기 시간
            visibility_timeout: 수신한 메시지를 다른 소비자에게 숨길 시간

        Returns:
            Message | None: 대기 시간 내 메시지가 없으면 None

        Raises:
            QueueTransportError: 큐 호출 실패
        """
        ...

    @abstractmethod
    async def delete(self, queue_url: str, receipt_handle: str) -> None:
        """
        메시지 삭제 (ack)

        Raises:
            QueueTransportError: 큐 호출 실패
        """
        ...

    @abstractmethod
    async def send(self, queue_url: str, body: str) -> None:
        """
        지정한 큐로 메시지 전송 (DLQ 이동용)

        Raises:
            QueueTransportError: 큐 호출 실패
        """
        ...
