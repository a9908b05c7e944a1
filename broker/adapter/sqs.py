"""SQS Queue Adapter"""
import asyncio
import functools
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from broker.adapter.base import BaseQueueAdapter
from broker.exception import QueueConnectionError, QueueTransportError
from broker.model.config import SqsConfig
from broker.model.message import Message, RECEIVE_COUNT_ATTRIBUTE

logger = logging.getLogger(__name__)

# long poll(최대 20초)보다 길어야 함
_READ_TIMEOUT_SECONDS = 30


class SqsAdapter(BaseQueueAdapter):
    """
    SQS 큐 어댑터

    boto3 클라이언트는 동기 방식이므로 워커 수만큼의 스레드풀에서 호출합니다.
    boto3 client 객체는 스레드 간 공유가 가능합니다.
    """

    def __init__(self, queue_url: str, config: SqsConfig, max_workers: int = 5, client: Any = None):
        """
        Args:
            queue_url: 수신 대상 큐 URL
            config: SQS 접속 설정
            max_workers: 동시 호출 스레드 수 (워커풀 크기와 동일하게 지정)
            client: boto3 SQS client (미지정 시 connect()에서 생성)
        """
        self._queue_url = queue_url
        self._config = config
        self._max_workers = max_workers
        self._client = client
        self._executor: ThreadPoolExecutor | None = None

    async def connect(self) -> None:
        """SQS client 및 스레드풀 준비"""
        if self._client is None:
            try:
                self._client = self._create_client()
            except (BotoCoreError, ValueError) as e:
                raise QueueConnectionError(f"Failed to create SQS client: {e}")

        self._executor = ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="sqs",
        )
        logger.info(
            f"SQS adapter connected: queue_url={self._queue_url}, "
            f"endpoint={self._config.endpoint_url or 'aws'}, max_workers={self._max_workers}"
        )

    async def disconnect(self) -> None:
        """스레드풀 정리"""
        if self._executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
            logger.info("SQS adapter disconnected")

    async def receive(self, wait_seconds: int, visibility_timeout: int) -> Message | None:
        response = await self._call(
            "receive",
            self._client.receive_message,
            QueueUrl=self._queue_url,
            MaxNumberOfMessages=1,
            WaitTimeSeconds=wait_seconds,
            VisibilityTimeout=visibility_timeout,
            AttributeNames=[RECEIVE_COUNT_ATTRIBUTE],
        )

        messages = response.get("Messages") or []
        if not messages:
            return None

        raw = messages[0]
        message = Message(
            receipt_handle=raw["ReceiptHandle"],
            body=raw.get("Body", ""),
            attributes=raw.get("Attributes") or {},
            message_id=raw.get("MessageId"),
        )
        logger.debug(
            f"Received message: id={message.message_id}, "
            f"receive_count={message.attributes.get(RECEIVE_COUNT_ATTRIBUTE)}"
        )
        return message

    async def delete(self, queue_url: str, receipt_handle: str) -> None:
        await self._call(
            "delete",
            self._client.delete_message,
            QueueUrl=queue_url,
            ReceiptHandle=receipt_handle,
        )

    async def send(self, queue_url: str, body: str) -> None:
        await self._call(
            "send",
            self._client.send_message,
            QueueUrl=queue_url,
            MessageBody=body,
        )

    async def _call(self, operation: str, method: Callable[..., dict], **params) -> dict:
        """boto3 호출을 스레드풀에서 실행하고 SDK 예외를 QueueTransportError로 변환"""
        if self._executor is None:
            raise RuntimeError("SQS adapter not connected")

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(
                self._executor,
                functools.partial(method, **params),
            )
        except (ClientError, BotoCoreError) as e:
            raise QueueTransportError(operation, str(e))

    def _create_client(self):
        """설정 기반 boto3 SQS client 생성 (자격 증명 미지정 시 기본 체인 사용)"""
        config = Config(
            connect_timeout=self._config.connect_timeout_seconds,
            read_timeout=_READ_TIMEOUT_SECONDS,
            retries={"max_attempts": 3, "mode": "standard"},
            max_pool_connections=max(10, self._max_workers),
        )
        return boto3.client(
            "sqs",
            region_name=self._config.region,
            endpoint_url=self._config.endpoint_url,
            aws_access_key_id=self._config.aws_access_key_id,
            aws_secret_access_key=self._config.aws_secret_access_key,
            aws_session_token=self._config.aws_session_token,
            config=config,
        )
