"""
워커 라이프사이클 모듈

수신 -> 디스패치 -> 정리를 한 사이클로 실행합니다.

    IDLE -> RECEIVING -> DISPATCHING -> RECONCILING -> IDLE
              |  (메시지 없음 / 수신 오류)
              +-------------------------------------> IDLE
"""

import asyncio
import logging
from enum import Enum

from broker.adapter.base import BaseQueueAdapter
from broker.exception import QueueTransportError
from worker.dispatcher import Dispatcher
from worker.model import WorkerConfig
from worker.reconciler import Reconciler

logger = logging.getLogger(__name__)


class LifecycleState(str, Enum):
    """라이프사이클 상태"""
    IDLE = "IDLE"
    RECEIVING = "RECEIVING"
    DISPATCHING = "DISPATCHING"
    RECONCILING = "RECONCILING"


class WorkerLifecycle:
    """
    워커 1개의 실행 단위

    run()은 한 사이클만 실행하며 어떤 단계의 오류도 밖으로 던지지 않습니다.
    (취소(CancelledError)는 종료 처리를 위해 그대로 전파)
    """

    def __init__(
        self,
        worker_id: int,
        config: WorkerConfig,
        adapter: BaseQueueAdapter,
        dispatcher: Dispatcher,
        reconciler: Reconciler,
    ):
        self.worker_id = worker_id
        self._config = config
        self._adapter = adapter
        self._dispatcher = dispatcher
        self._reconciler = reconciler
        self.state = LifecycleState.IDLE
        self.cycles = 0

    async def run(self) -> None:
        """수신 -> 디스패치 -> 정리 한 사이클 실행"""
        try:
            await self._cycle()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                f"Worker {self.worker_id} cycle failed in state {self.state.value}: {e}",
                exc_info=True
            )
        finally:
            self.state = LifecycleState.IDLE
            self.cycles += 1

    async def _cycle(self) -> None:
        self.state = LifecycleState.RECEIVING
        logger.debug(f"Worker {self.worker_id} requesting message")
        try:
            message = await self._adapter.receive(
                wait_seconds=self._config.wait_time_seconds,
                visibility_timeout=self._config.visibility_timeout,
            )
        except QueueTransportError as e:
            # 다음 사이클에서 자연스럽게 재시도됨
            logger.error(f"Worker {self.worker_id} receive failed: {e}")
            return

        if message is None:
            return

        self.state = LifecycleState.DISPATCHING
        outcome = await self._dispatcher.dispatch(message)

        self.state = LifecycleState.RECONCILING
        action = await self._reconciler.reconcile(message, outcome)
        logger.debug(
            f"Worker {self.worker_id} finished message: message_id={message.message_id}, "
            f"outcome={outcome.kind.value}, action={action.value}"
        )
