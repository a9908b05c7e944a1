"""
메시지 정리(reconcile) 모듈

디스패치 결과에 따라 큐에 대한 후속 조치를 결정하고 실행합니다.

    성공                           -> 삭제
    실패 + DLQ 에뮬레이션 off       -> 유지 (visibility timeout 후 재전달)
    실패 + 수신 횟수 < 임계값        -> 유지
    실패 + 수신 횟수 >= 임계값       -> DLQ 전송 후 삭제
    실패 + 수신 횟수 속성 없음/오류   -> 임계값 미만으로 간주 (유지)
"""

import logging
from enum import Enum

from broker.adapter.base import BaseQueueAdapter
from broker.exception import AttributeParseError, QueueTransportError
from broker.model.message import Message
from common.metrics import BaseMetrics, NullMetrics, emit
from worker.model import DispatchOutcome, WorkerConfig

logger = logging.getLogger(__name__)


class ReconcileAction(str, Enum):
    """정리 결과"""
    DELETED = "DELETED"
    LEFT_FOR_RETRY = "LEFT_FOR_RETRY"
    DEAD_LETTERED = "DEAD_LETTERED"
    ERROR = "ERROR"  # 큐 호출 실패, 메시지는 큐 정책에 맡김


class Reconciler:
    """메시지 정리기 (큐 오류는 로그만 남기고 전파하지 않음)"""

    def __init__(self, config: WorkerConfig, adapter: BaseQueueAdapter, metrics: BaseMetrics | None = None):
        self._config = config
        self._adapter = adapter
        self._metrics = metrics or NullMetrics()

    async def reconcile(self, message: Message, outcome: DispatchOutcome) -> ReconcileAction:
        """
        디스패치 결과에 따른 큐 조치 실행

        Args:
            message: 처리한 메시지
            outcome: 디스패치 결과

        Returns:
            ReconcileAction: 수행한 조치
        """
        if outcome.is_success:
            return await self._delete(message)

        if not self._config.emulate_dead_letter:
            logger.info(f"Leaving message for redelivery: message_id={message.message_id}")
            return ReconcileAction.LEFT_FOR_RETRY

        try:
            receive_count = message.receive_count
        except AttributeParseError as e:
            logger.warning(f"{e.message}, treating as below threshold: message_id={message.message_id}")
            return ReconcileAction.LEFT_FOR_RETRY

        if receive_count < self._config.max_receive_count:
            logger.info(
                f"Leaving message for redelivery: message_id={message.message_id}, "
                f"receive_count={receive_count}/{self._config.max_receive_count}"
            )
            return ReconcileAction.LEFT_FOR_RETRY

        return await self._dead_letter(message, receive_count)

    async def _delete(self, message: Message) -> ReconcileAction:
        try:
            await self._adapter.delete(self._config.queue_url, message.receipt_handle)
        except QueueTransportError as e:
            logger.error(f"Failed to delete message: message_id={message.message_id}, error={e}")
            return ReconcileAction.ERROR

        emit(self._metrics.increment, "deleted")
        logger.debug(f"Message deleted: message_id={message.message_id}")
        return ReconcileAction.DELETED

    async def _dead_letter(self, message: Message, receive_count: int) -> ReconcileAction:
        """DLQ로 본문 전송 후 원본 삭제 (전송 실패 시 원본은 삭제하지 않음)"""
        logger.warning(
            f"Sending message to dead letter queue: message_id={message.message_id}, "
            f"receive_count={receive_count}"
        )
        try:
            await self._adapter.send(self._config.dead_letter_queue_url, message.body)
        except QueueTransportError as e:
            # 원본이 남아 재전달되므로 다음 수신 시 다시 DLQ 이동을 시도함
            logger.error(f"Failed to send message to dead letter queue: message_id={message.message_id}, error={e}")
            return ReconcileAction.ERROR

        emit(self._metrics.increment, "dead_lettered")

        if await self._delete(message) is ReconcileAction.ERROR:
            return ReconcileAction.ERROR
        return ReconcileAction.DEAD_LETTERED
