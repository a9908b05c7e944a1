"""
Worker 모델 - 설정 및 디스패치 결과 구조체
"""
from worker.model.config import WorkerConfig
from worker.model.outcome import DispatchOutcome, OutcomeKind

__all__ = ["WorkerConfig", "DispatchOutcome", "OutcomeKind"]
