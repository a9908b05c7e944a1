"""
Worker 관련 예외 클래스 정의
"""


class WorkerError(Exception):
    """Worker 기본 예외"""
    pass


class ConfigurationError(WorkerError):
    """설정 값 오류"""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class JobDispatchError(WorkerError):
    """잡 엔드포인트 호출 실패 (연결 오류, 타임아웃)"""
    def __init__(self, url: str, reason: str, detail: str = ""):
        self.url = url
        self.reason = reason
        self.detail = detail
        self.message = f"Job dispatch to {url} failed: {reason}" + (f" ({detail})" if detail else "")
        super().__init__(self.message)


class JobRejectedError(WorkerError):
    """잡 엔드포인트가 2xx 외 상태 코드를 반환함"""
    def __init__(self, status_code: int, status: str, body_snippet: str = ""):
        self.status_code = status_code
        self.status = status
        self.body_snippet = body_snippet
        self.message = f"Host returned error status ({status})"
        super().__init__(self.message)
