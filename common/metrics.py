"""
메트릭 전송 모듈

DogStatsD(UDP)로 카운터/히스토그램을 전송합니다. 전송은 백그라운드 스레드에서
처리되며, 실패해도 메시지 처리 흐름에는 영향을 주지 않습니다.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable

from datadog.dogstatsd import DogStatsd
from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)


class MetricsConfig(BaseModel):
    """메트릭 설정"""
    model_config = ConfigDict(frozen=True)

    enabled: bool = False
    host: str = "localhost"
    port: int = Field(default=8125, ge=1, le=65535)
    namespace: str | None = "sqsd"
    constant_tags: list[str] = Field(default_factory=list)
    sender_queue_size: int = Field(default=1024, ge=0)


class BaseMetrics(ABC):
    """메트릭 싱크 인터페이스 (fire-and-forget)"""

    @abstractmethod
    def increment(self, name: str, tags: list[str] | None = None) -> None:
        ...

    @abstractmethod
    def histogram(self, name: str, value: float, tags: list[str] | None = None) -> None:
        ...

    def close(self) -> None:
        """남은 메트릭 전송 및 자원 정리"""
        pass


class NullMetrics(BaseMetrics):
    """메트릭 비활성화 시 사용하는 no-op 구현"""

    def increment(self, name: str, tags: list[str] | None = None) -> None:
        pass

    def histogram(self, name: str, value: float, tags: list[str] | None = None) -> None:
        pass


class StatsdMetrics(BaseMetrics):
    """DogStatsD 메트릭 싱크"""

    def __init__(self, config: MetricsConfig, client: DogStatsd | None = None):
        self._client = client or DogStatsd(
            host=config.host,
            port=config.port,
            namespace=config.namespace,
            constant_tags=list(config.constant_tags),
            disable_background_sender=False,
            sender_queue_size=config.sender_queue_size,
        )
        logger.info(f"StatsD metrics enabled: {config.host}:{config.port}, namespace={config.namespace}")

    def increment(self, name: str, tags: list[str] | None = None) -> None:
        try:
            self._client.increment(name, tags=tags)
        except Exception as e:
            logger.debug(f"Failed to record counter {name}: {e}")

    def histogram(self, name: str, value: float, tags: list[str] | None = None) -> None:
        try:
            self._client.histogram(name, value, tags=tags)
        except Exception as e:
            logger.debug(f"Failed to record histogram {name}: {e}")

    def close(self) -> None:
        try:
            self._client.flush()
            self._client.close_socket()
        except Exception as e:
            logger.debug(f"Failed to close StatsD client: {e}")


def emit(record: Callable[..., None], *args, **kwargs) -> None:
    """메트릭 기록 (싱크 구현과 무관하게 예외를 호출자에게 전파하지 않음)"""
    try:
        record(*args, **kwargs)
    except Exception as e:
        logger.debug(f"Failed to record metric {args[0] if args else '?'}: {e}")


def create_metrics(config: MetricsConfig) -> BaseMetrics:
    """설정에 맞는 메트릭 싱크 생성"""
    if not config.enabled:
        return NullMetrics()
    return StatsdMetrics(config)
