"""큐에서 수신한 메시지 모델"""
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from broker.exception import AttributeParseError

# 큐 서비스가 관리하는 수신 횟수 속성
RECEIVE_COUNT_ATTRIBUTE = "ApproximateReceiveCount"

# 부호(선택) + ASCII 숫자만 허용 ("1_0", " 3 ", 전각 숫자 등은 형식 오류)
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class Message:
    """
    수신된 메시지 (읽기 전용)

    receipt_handle은 현재 소비자가 메시지를 점유하고 있음을 증명하는 토큰으로,
    delete 시 사용합니다.
    """
    receipt_handle: str
    body: str
    attributes: Mapping[str, str] = field(default_factory=dict)
    message_id: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def receive_count(self) -> int:
        """
        ApproximateReceiveCount 파싱

        Raises:
            AttributeParseError: 속성이 없거나 정수가 아닌 경우
        """
        raw = self.attributes.get(RECEIVE_COUNT_ATTRIBUTE)
        if raw is None:
            raise AttributeParseError(RECEIVE_COUNT_ATTRIBUTE, None)
        if not isinstance(raw, str) or not _INTEGER_PATTERN.fullmatch(raw):
            raise AttributeParseError(RECEIVE_COUNT_ATTRIBUTE, raw)
        return int(raw)
