"""워커풀 설정 모델"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

# SQS visibility timeout 상한 (12시간)
SQS_MAX_VISIBILITY_SECONDS = 43200


class WorkerConfig(BaseModel):
    """워커풀 설정 (프로세스 생애 동안 불변)"""
    model_config = ConfigDict(frozen=True)

    queue_url: str = Field(..., min_length=1)
    dead_letter_queue_url: str | None = None
    worker_url: str = Field(..., min_length=1, description="잡 엔드포인트 URL")
    timeout_seconds: int = Field(default=60, ge=1, description="잡 1건당 타임아웃")
    emulate_dead_letter: bool = Field(
        default=False,
        description="큐 서비스에 DLQ 기능이 없을 때(ElasticMQ 등) DLQ 이동을 직접 수행",
    )
    max_receive_count: int = Field(default=5, ge=1)
    pool_size: int = Field(default=5, ge=1, le=500)
    wait_time_seconds: int = Field(default=20, ge=0, le=20, description="long poll 대기 시간")
    visibility_margin_seconds: int = Field(default=5, ge=5, le=300)
    shutdown_timeout_seconds: int = Field(default=30, ge=0)
    body_snippet_bytes: int = Field(default=1024, ge=0)

    @model_validator(mode="after")
    def _check_consistency(self) -> "WorkerConfig":
        if self.emulate_dead_letter and not self.dead_letter_queue_url:
            raise ValueError("dead_letter_queue_url is required when emulate_dead_letter is enabled")
        if self.visibility_timeout > SQS_MAX_VISIBILITY_SECONDS:
            raise ValueError(
                f"timeout_seconds + visibility_margin_seconds must not exceed {SQS_MAX_VISIBILITY_SECONDS}"
            )
        return self

    @property
    def visibility_timeout(self) -> int:
        """처리 중인 메시지가 재전달되지 않도록 잡 타임아웃에 여유분을 더한 값"""
        return self.timeout_seconds + self.visibility_margin_seconds
