"""
WorkerPool: 큐 -> HTTP 잡 브리지 워커풀 모듈

pool_size 개의 워커가 각자 수신 -> 디스패치 -> 정리 사이클을 무한 반복합니다.
워커 수는 프로세스 생애 동안 일정하게 유지됩니다.

실행 방법:
    python main.py --config config/worker.yaml
"""

import asyncio
import logging

import httpx

from broker.adapter.base import BaseQueueAdapter
from broker.exception import QueueConnectionError
from common.metrics import BaseMetrics, NullMetrics
from worker.dispatcher import Dispatcher
from worker.lifecycle import WorkerLifecycle
from worker.model import WorkerConfig
from worker.reconciler import Reconciler

logger = logging.getLogger(__name__)


class WorkerPool:
    """
    워커풀 (Pool Supervisor)

    고정 개수의 워커 태스크를 띄우고, 각 태스크는 사이클이 끝나면 즉시
    다음 사이클을 시작합니다. 큐 클라이언트와 HTTP 클라이언트는 모든 워커가 공유합니다.
    """

    def __init__(
        self,
        config: WorkerConfig,
        adapter: BaseQueueAdapter,
        http_client: httpx.AsyncClient | None = None,
        metrics: BaseMetrics | None = None,
    ):
        """
        Args:
            config: 워커풀 설정
            adapter: 큐 어댑터
            http_client: 잡 호출용 HTTP 클라이언트 (미지정 시 start()에서 생성)
            metrics: 메트릭 싱크 (미지정 시 no-op)
        """
        self._config = config
        self._adapter = adapter
        self._http_client = http_client
        self._owns_http_client = http_client is None
        self._metrics = metrics or NullMetrics()
        self._running = False
        self._stop_event: asyncio.Event | None = None
        self._running_tasks: set[asyncio.Task] = set()
        self._lifecycles: list[WorkerLifecycle] = []

    async def start(self) -> None:
        """워커풀 시작 (stop() 호출 전까지 반환하지 않음)"""
        if self._running:
            logger.warning("WorkerPool is already running")
            return

        self._running = True
        self._stop_event = asyncio.Event()

        try:
            await self._adapter.connect()
        except Exception as e:
            self._running = False
            raise QueueConnectionError(f"Failed to connect to queue: {e}")

        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._config.timeout_seconds),
                limits=httpx.Limits(max_connections=self._config.pool_size),
            )

        dispatcher = Dispatcher(self._config, self._http_client, self._metrics)
        reconciler = Reconciler(self._config, self._adapter, self._metrics)
        self._lifecycles = [
            WorkerLifecycle(worker_id, self._config, self._adapter, dispatcher, reconciler)
            for worker_id in range(self._config.pool_size)
        ]

        for lifecycle in self._lifecycles:
            task = asyncio.create_task(
                self._worker_loop(lifecycle),
                name=f"worker-{lifecycle.worker_id}",
            )
            self._running_tasks.add(task)
            task.add_done_callback(self._on_task_done)

        logger.info(
            f"WorkerPool started (pool_size={self._config.pool_size}, "
            f"queue_url={self._config.queue_url}, worker_url={self._config.worker_url})"
        )

        try:
            await self._stop_event.wait()
        except asyncio.CancelledError:
            logger.info("WorkerPool cancelled")
        finally:
            await self._wait_running_tasks()
            await self._close()
            self._running = False
            logger.info("WorkerPool stopped")

    async def stop(self) -> None:
        """WorkerPool graceful shutdown"""
        self.request_stop()

    def request_stop(self) -> None:
        """
        종료 요청 (동기)

        시그널 핸들러처럼 코루틴을 기다릴 수 없는 곳에서 호출합니다.
        실제 종료 처리는 start() 안에서 진행됩니다.
        """
        if not self._running:
            return

        logger.info("Stopping WorkerPool...")
        if self._stop_event:
            self._stop_event.set()

    async def _worker_loop(self, lifecycle: WorkerLifecycle) -> None:
        """워커 1개의 반복 루프 (사이클 종료 시 즉시 재시작)"""
        while not self._stop_event.is_set():
            try:
                await lifecycle.run()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Worker {lifecycle.worker_id} crashed, restarting: {e}", exc_info=True)
            # 즉시 실패한 사이클이 이벤트 루프를 점유하지 않도록 양보
            await asyncio.sleep(0)

    def _on_task_done(self, task: asyncio.Task) -> None:
        """태스크 완료 콜백"""
        self._running_tasks.discard(task)
        if not task.cancelled() and task.exception():
            logger.error(f"Task exception: {task.exception()}")

    async def _wait_running_tasks(self) -> None:
        """진행 중인 사이클 완료 대기 (graceful shutdown)"""
        if not self._running_tasks:
            return

        logger.info(f"Waiting for {len(self._running_tasks)} running workers...")

        try:
            await asyncio.wait_for(
                asyncio.gather(*self._running_tasks, return_exceptions=True),
                timeout=self._config.shutdown_timeout_seconds
            )
            logger.info("All workers completed")
        except asyncio.TimeoutError:
            logger.warning(
                f"Shutdown timeout ({self._config.shutdown_timeout_seconds}s), "
                f"{len(self._running_tasks)} workers still running"
            )
            # 강제 취소
            for task in list(self._running_tasks):
                task.cancel()
            await asyncio.gather(*self._running_tasks, return_exceptions=True)

    async def _close(self) -> None:
        if self._owns_http_client and self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
        await self._adapter.disconnect()

    @property
    def is_running(self) -> bool:
        """실행 중 여부"""
        return self._running

    @property
    def running_task_count(self) -> int:
        """실행 중인 워커 태스크 수"""
        return len(self._running_tasks)

    @property
    def lifecycles(self) -> list[WorkerLifecycle]:
        return list(self._lifecycles)
