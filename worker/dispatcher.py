"""
잡 디스패처 모듈

수신한 메시지 본문을 설정된 엔드포인트로 POST 하고 결과를 분류합니다.
"""

import asyncio
import logging
import time

import httpx

from broker.exception import AttributeParseError
from broker.model.message import Message
from common.metrics import BaseMetrics, NullMetrics, emit
from worker.exception import JobDispatchError, JobRejectedError
from worker.model import DispatchOutcome, WorkerConfig

logger = logging.getLogger(__name__)

# 큐에서 전달된 요청임을 알리는 헤더 (Elastic Beanstalk sqsd 호환)
FORWARDED_HEADER = "X-Aws-Sqsd-Receive-Count"


class Dispatcher:
    """
    잡 디스패처

    2xx 응답만 성공으로 간주하며, 그 외 응답이나 전송 오류는 모두 실패입니다.
    예외를 밖으로 던지지 않고 항상 DispatchOutcome을 반환합니다.
    """

    def __init__(self, config: WorkerConfig, client: httpx.AsyncClient, metrics: BaseMetrics | None = None):
        self._config = config
        self._client = client
        self._metrics = metrics or NullMetrics()

    async def dispatch(self, message: Message) -> DispatchOutcome:
        """
        메시지 1건을 잡으로 실행

        결과를 먼저 확정한 뒤 메트릭을 기록하므로, 메트릭 싱크 오류는
        결과(이후 삭제/재시도 판단)에 영향을 주지 않습니다.

        Args:
            message: 수신한 메시지

        Returns:
            DispatchOutcome: 성공 또는 실패(상태 코드, 응답 일부 포함)
        """
        emit(self._metrics.increment, "received")
        started = time.perf_counter()

        try:
            status_code, status = await self._invoke(message)
            outcome = DispatchOutcome.success(status_code, status)
            logger.info(f"Job succeeded: message_id={message.message_id}, status={status}")

        except JobRejectedError as e:
            outcome = DispatchOutcome.rejected(e.status_code, e.status, e.body_snippet)
            logger.warning(
                f"Job rejected: message_id={message.message_id}, status={e.status}, "
                f"body={e.body_snippet!r}"
            )

        except JobDispatchError as e:
            outcome = DispatchOutcome.transport_error(e.reason)
            logger.error(f"Job dispatch failed: message_id={message.message_id}, error={e}")

        except Exception as e:
            outcome = DispatchOutcome.transport_error(type(e).__name__)
            logger.error(f"Unexpected error dispatching message {message.message_id}: {e}", exc_info=True)

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._record(outcome, elapsed_ms)
        return outcome

    def _record(self, outcome: DispatchOutcome, elapsed_ms: float) -> None:
        if outcome.is_success:
            emit(self._metrics.increment, "success")
        else:
            emit(self._metrics.increment, "error", tags=[f"status:{outcome.status}"])
        emit(self._metrics.histogram, "response_time", elapsed_ms)

    async def _invoke(self, message: Message) -> tuple[int, str]:
        """POST 요청 실행 (타임아웃 적용), 2xx가 아니면 JobRejectedError"""
        url = self._config.worker_url
        timeout = self._config.timeout_seconds

        try:
            response = await asyncio.wait_for(
                self._client.post(
                    url,
                    content=message.body.encode("utf-8"),
                    headers=self._headers(message),
                    timeout=timeout,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            raise JobDispatchError(url, "Timeout", f"no response within {timeout}s")
        except httpx.HTTPError as e:
            raise JobDispatchError(url, type(e).__name__, str(e))

        status = f"{response.status_code} {response.reason_phrase}".strip()
        if not response.is_success:
            # 진단용으로 응답 본문 앞부분만 보관 (바이트 기준, 잘린 문자는 대체 문자로)
            snippet = response.content[: self._config.body_snippet_bytes].decode("utf-8", "replace")
            raise JobRejectedError(response.status_code, status, snippet)

        return response.status_code, status

    @staticmethod
    def _headers(message: Message) -> dict[str, str]:
        try:
            receive_count = str(message.receive_count)
        except AttributeParseError:
            receive_count = "1"
        return {
            "Content-Type": "application/json",
            FORWARDED_HEADER: receive_count,
        }
