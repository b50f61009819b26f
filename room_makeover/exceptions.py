"""도메인 예외"""


class DesignAssistantError(Exception):
    """디자인 어시스턴트 공통 예외"""


class ValidationError(DesignAssistantError):
    """사용자 입력 누락 또는 AI 응답 필드 검증 실패"""


class ServiceError(DesignAssistantError):
    """원격 AI 호출 실패 또는 응답 파싱 불가"""


class OperationInProgressError(DesignAssistantError):
    """같은 세션에서 이미 진행 중인 작업이 있음"""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"'{operation}' is already in progress for this session.")
