"""SQS 접속 설정"""
from pydantic import BaseModel, ConfigDict, Field


class SqsConfig(BaseModel):
    """SQS 클라이언트 설정 (endpoint_url 지정 시 ElasticMQ 등 호환 서비스 사용)"""
    model_config = ConfigDict(frozen=True)

    region: str = Field(default="us-east-1", min_length=1)
    endpoint_url: str | None = None
    aws_access_key_id: str | None = None
    aws_secret_access_key: str | None = None
    aws_session_token: str | None = None
    connect_timeout_seconds: int = Field(default=5, ge=1, le=60)
