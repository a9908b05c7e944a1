"""
디스패치 결과 모델

메시지 1건당 한 번 생성되어 Reconciler가 한 번 소비합니다.
"""

from dataclasses import dataclass
from enum import Enum


class OutcomeKind(str, Enum):
    """디스패치 결과 종류"""
    SUCCESS = "SUCCESS"
    REJECTED = "REJECTED"  # 2xx 외 응답
    TRANSPORT_ERROR = "TRANSPORT_ERROR"  # 연결 실패, 타임아웃


@dataclass(frozen=True)
class DispatchOutcome:
    """디스패치 결과 (불변)"""
    kind: OutcomeKind
    status_code: int | None = None
    status: str = ""
    body_snippet: str = ""

    @property
    def is_success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def success(cls, status_code: int, status: str) -> "DispatchOutcome":
        return cls(OutcomeKind.SUCCESS, status_code=status_code, status=status)

    @classmethod
    def rejected(cls, status_code: int, status: str, body_snippet: str = "") -> "DispatchOutcome":
        return cls(
            OutcomeKind.REJECTED,
            status_code=status_code,
            status=status,
            body_snippet=body_snippet,
        )

    @classmethod
    def transport_error(cls, reason: str) -> "DispatchOutcome":
        return cls(OutcomeKind.TRANSPORT_ERROR, status=reason)
