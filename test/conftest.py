"""
테스트 공용 픽스처

- FakeQueueAdapter: visibility timeout을 흉내 내는 메모리 큐
- RecordingMetrics: 기록된 메트릭을 보관하는 싱크
"""

import asyncio
import itertools
import sys
from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest

# 프로젝트 루트 경로 추가
sys.path.insert(0, str(Path(__file__).parent.parent))

from broker.adapter.base import BaseQueueAdapter
from broker.exception import QueueTransportError
from broker.model.message import Message, RECEIVE_COUNT_ATTRIBUTE
from common.metrics import BaseMetrics
from worker.model import WorkerConfig

QUEUE_URL = "https://sqs.test/000000000000/jobs"
DEAD_LETTER_QUEUE_URL = "https://sqs.test/000000000000/jobs-dead"
WORKER_URL = "http://worker.test/jobs"


@dataclass
class _StoredMessage:
    message_id: str
    body: str
    receive_count: int = 0
    invisible_until: float = 0.0
    receipt_handle: str | None = None


@dataclass
class FakeQueueAdapter(BaseQueueAdapter):
    """메모리 큐 어댑터 (수신 시 visibility timeout 동안 다른 워커에게 숨김)"""
    queue_url: str = QUEUE_URL
    fail_operations: set[str] = field(default_factory=set)
    connected: bool = False
    calls: list[tuple] = field(default_factory=list)
    sent: list[tuple[str, str]] = field(default_factory=list)
    deleted: list[str] = field(default_factory=list)
    _messages: list[_StoredMessage] = field(default_factory=list)
    _ids: itertools.count = field(default_factory=itertools.count)

    def enqueue(self, body: str, receive_count: int = 0) -> str:
        message_id = f"msg-{next(self._ids)}"
        self._messages.append(_StoredMessage(message_id, body, receive_count))
        return message_id

    @property
    def pending(self) -> int:
        return len(self._messages)

    async def connect(self) -> None:
        if "connect" in self.fail_operations:
            raise QueueTransportError("connect", "connection refused")
        self.connected = True

    async def disconnect(self) -> None:
        self.connected = False

    async def receive(self, wait_seconds: int, visibility_timeout: int) -> Message | None:
        self.calls.append(("receive", wait_seconds, visibility_timeout))
        if "receive" in self.fail_operations:
            await asyncio.sleep(0.001)
            raise QueueTransportError("receive", "service unavailable")

        now = asyncio.get_running_loop().time()
        for stored in self._messages:
            if stored.invisible_until <= now:
                stored.receive_count += 1
                stored.invisible_until = now + visibility_timeout
                stored.receipt_handle = f"{stored.message_id}-{stored.receive_count}"
                return Message(
                    receipt_handle=stored.receipt_handle,
                    body=stored.body,
                    attributes={RECEIVE_COUNT_ATTRIBUTE: str(stored.receive_count)},
                    message_id=stored.message_id,
                )

        # long poll 대기 흉내 (빈 큐에서 busy loop 방지)
        await asyncio.sleep(0.001)
        return None

    async def delete(self, queue_url: str, receipt_handle: str) -> None:
        self.calls.append(("delete", queue_url, receipt_handle))
        if "delete" in self.fail_operations:
            raise QueueTransportError("delete", "service unavailable")
        self.deleted.append(receipt_handle)
        self._messages = [m for m in self._messages if m.receipt_handle != receipt_handle]

    async def send(self, queue_url: str, body: str) -> None:
        self.calls.append(("send", queue_url, body))
        if "send" in self.fail_operations:
            raise QueueTransportError("send", "service unavailable")
        self.sent.append((queue_url, body))

    def operations(self) -> list[str]:
        return [call[0] for call in self.calls]


class RecordingMetrics(BaseMetrics):
    """기록된 메트릭 확인용 싱크"""

    def __init__(self):
        self.counters: list[tuple[str, list[str] | None]] = []
        self.histograms: list[tuple[str, float]] = []

    def increment(self, name: str, tags: list[str] | None = None) -> None:
        self.counters.append((name, tags))

    def histogram(self, name: str, value: float, tags: list[str] | None = None) -> None:
        self.histograms.append((name, value))

    def counter_names(self) -> list[str]:
        return [name for name, _ in self.counters]


class FailingMetrics(BaseMetrics):
    """모든 기록 호출에서 예외를 던지는 싱크"""

    def increment(self, name: str, tags: list[str] | None = None) -> None:
        raise OSError("statsd down")

    def histogram(self, name: str, value: float, tags: list[str] | None = None) -> None:
        raise OSError("statsd down")


def make_message(body: str = '{"task": "sample"}', receive_count: str | None = "1", handle: str = "rh-1") -> Message:
    attributes = {} if receive_count is None else {RECEIVE_COUNT_ATTRIBUTE: receive_count}
    return Message(receipt_handle=handle, body=body, attributes=attributes, message_id="msg-test")


def make_client(handler) -> httpx.AsyncClient:
    """MockTransport 기반 HTTP 클라이언트"""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


def ok_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text="ok")


def error_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, text="boom")


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def worker_config() -> WorkerConfig:
    """DLQ 에뮬레이션 활성화, 임계값 3"""
    return WorkerConfig(
        queue_url=QUEUE_URL,
        dead_letter_queue_url=DEAD_LETTER_QUEUE_URL,
        worker_url=WORKER_URL,
        timeout_seconds=1,
        emulate_dead_letter=True,
        max_receive_count=3,
        pool_size=2,
        wait_time_seconds=0,
        shutdown_timeout_seconds=5,
    )


@pytest.fixture
def adapter() -> FakeQueueAdapter:
    return FakeQueueAdapter()


@pytest.fixture
def metrics() -> RecordingMetrics:
    return RecordingMetrics()
