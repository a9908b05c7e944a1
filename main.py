"""
sqsd-bridge 진입점

SQS(또는 ElasticMQ) 큐에서 메시지를 받아 HTTP 잡 엔드포인트로 전달하는 워커풀을 실행합니다.

사용법:
    python main.py                                  # config/worker.yaml 사용
    python main.py --config /etc/sqsd/worker.yaml
    python main.py --log-level DEBUG --text-logs

환경 변수 SQSD_<SECTION>_<KEY> 로 설정 파일 값을 덮어쓸 수 있습니다.
    예: SQSD_WORKER_QUEUE_URL, SQSD_WORKER_POOL_SIZE, SQSD_METRICS_ENABLED
"""

import argparse
import asyncio
import logging
import os
import signal
import sys
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, ValidationError

from broker.adapter.sqs import SqsAdapter
from broker.model.config import SqsConfig
from common.logging import LoggingConfig, configure_logging
from common.metrics import MetricsConfig, create_metrics
from worker.exception import ConfigurationError
from worker.main import WorkerPool
from worker.model import WorkerConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "config" / "worker.yaml"
ENV_PREFIX = "SQSD_"

# 콤마로 구분된 환경 변수 값을 리스트로 변환할 키
_LIST_KEYS = {"constant_tags"}


class AppConfig(BaseModel):
    """전체 설정 (config/worker.yaml)"""
    worker: WorkerConfig
    sqs: SqsConfig = Field(default_factory=SqsConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def apply_env_overrides(data: dict[str, Any], environ: Mapping[str, str]) -> dict[str, Any]:
    """SQSD_<SECTION>_<KEY> 환경 변수 값을 설정 딕셔너리에 반영"""
    merged = {section: dict(values or {}) for section, values in data.items()}

    for name, value in environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        section, _, key = name[len(ENV_PREFIX):].lower().partition("_")
        if section not in AppConfig.model_fields or not key:
            continue
        if key in _LIST_KEYS:
            value = [item.strip() for item in value.split(",") if item.strip()]
        merged.setdefault(section, {})[key] = value

    return merged


def load_config(path: Path, environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    YAML 설정 로드

    Args:
        path: 설정 파일 경로 (없으면 환경 변수만 사용)
        environ: 환경 변수 (기본값 os.environ)

    Raises:
        ConfigurationError: 설정 파일 형식 오류 또는 값 검증 실패
    """
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigurationError(f"Invalid YAML in {path}: {e}")
        if not isinstance(data, dict):
            raise ConfigurationError(f"Config root must be a mapping: {path}")

    data = apply_env_overrides(data, os.environ if environ is None else environ)

    try:
        return AppConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


async def main(config: AppConfig) -> None:
    """메인 함수"""
    metrics = create_metrics(config.metrics)
    adapter = SqsAdapter(
        config.worker.queue_url,
        config.sqs,
        max_workers=config.worker.pool_size,
    )
    worker_pool = WorkerPool(config.worker, adapter, metrics=metrics)

    # 시그널 핸들러
    loop = asyncio.get_running_loop()

    def signal_handler():
        logger.info("Received shutdown signal")
        worker_pool.request_stop()

    # Windows는 add_signal_handler를 지원하지 않음
    if sys.platform != "win32":
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, signal_handler)

    try:
        logger.info("Starting WorkerPool...")
        await worker_pool.start()
    finally:
        metrics.close()


def cli(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sqsd-bridge",
        description="SQS 메시지를 HTTP 잡 엔드포인트로 전달하는 워커"
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=DEFAULT_CONFIG_PATH,
        help=f"Config file path (default: {DEFAULT_CONFIG_PATH})"
    )
    parser.add_argument("--log-level", default=None, help="Override logging level")
    parser.add_argument("--text-logs", action="store_true", help="Plain text logs instead of JSON")
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 2

    configure_logging(
        config.logging,
        level=args.log_level,
        json_format=False if args.text_logs else None,
    )

    try:
        asyncio.run(main(config))
    except KeyboardInterrupt:
        print("\nShutdown requested by user")
    return 0


if __name__ == "__main__":
    sys.exit(cli())
