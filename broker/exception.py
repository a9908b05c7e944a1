"""큐 클라이언트 예외"""


class BrokerError(Exception):
    """큐 클라이언트 기본 예외"""
    pass


class QueueConnectionError(BrokerError):
    """큐 연결 실패"""
    pass


class QueueTransportError(BrokerError):
    """receive / delete / send 호출 실패"""
    def __init__(self, operation: str, reason: str):
        self.operation = operation
        self.reason = reason
        self.message = f"Queue {operation} failed: {reason}"
        super().__init__(self.message)


class AttributeParseError(BrokerError):
    """메시지 속성이 없거나 형식이 잘못됨"""
    def __init__(self, attribute: str, raw_value: str | None):
        self.attribute = attribute
        self.raw_value = raw_value
        if raw_value is None:
            self.message = f"Message attribute missing: {attribute}"
        else:
            self.message = f"Message attribute malformed: {attribute}={raw_value!r}"
        super().__init__(self.message)
