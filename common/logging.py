"""
구조화 로깅 설정

stdout(옵션으로 파일)에 JSON 한 줄 단위로 로그를 출력합니다.
워커 태스크 안에서 남긴 로그에는 태스크 이름(worker-N)이 함께 기록됩니다.
"""

import asyncio
import logging
import sys

from pydantic import BaseModel
from pythonjsonlogger.json import JsonFormatter

# 롱폴링/HTTP 호출마다 로그를 남기는 라이브러리
_NOISY_LOGGERS = ("asyncio", "boto3", "botocore", "urllib3", "httpx", "httpcore", "datadog")

_TEXT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - [%(task)s] %(message)s'


class LoggingConfig(BaseModel):
    """로깅 설정"""
    level: str = "INFO"
    json_format: bool = True
    log_file: str | None = None


class TaskNameFilter(logging.Filter):
    """현재 asyncio 태스크 이름을 레코드에 추가 (태스크 밖이면 '-')"""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            task = asyncio.current_task()
        except RuntimeError:
            task = None
        record.task = task.get_name() if task else "-"
        return True


class WorkerJsonFormatter(JsonFormatter):
    """JSON 로그 포매터"""

    def add_fields(self, log_record, record, message_dict):
        super().add_fields(log_record, record, message_dict)
        log_record['timestamp'] = self.formatTime(record)
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['task'] = getattr(record, 'task', '-')


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: str | None = None
) -> None:
    """
    루트 로거 설정

    Args:
        level: 로그 레벨 (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_format: JSON 포맷 사용 여부 (False면 텍스트 포맷)
        log_file: 로그 파일 경로 (None이면 stdout만 사용)
    """
    if json_format:
        formatter = WorkerJsonFormatter('%(timestamp)s %(level)s %(logger)s %(message)s')
    else:
        formatter = logging.Formatter(_TEXT_FORMAT)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    task_filter = TaskNameFilter()
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(task_filter)

    logging.basicConfig(
        level=getattr(logging, level.upper()),
        handlers=handlers,
        force=True
    )

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def configure_logging(config: LoggingConfig, level: str | None = None, json_format: bool | None = None) -> None:
    """설정 파일 값에 CLI 옵션(level, json_format)을 우선 적용하여 로깅 설정"""
    setup_logging(
        level=level or config.level,
        json_format=config.json_format if json_format is None else json_format,
        log_file=config.log_file,
    )
