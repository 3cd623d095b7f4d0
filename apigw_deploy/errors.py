"""
errors
------

액션 실행 중 발생하는 오류 타입 정의.
모든 오류는 ActionError 를 상속하며, orchestrator 에서 실패 신호로 변환된다.
"""

from __future__ import annotations

from typing import Optional


class ActionError(Exception):
    """액션 실행을 중단시키는 모든 오류의 기반 클래스."""


class InputError(ActionError):
    """입력 검증 단계의 오류. 네트워크 호출 전에 발생한다."""


class MissingInputError(InputError):
    def __init__(self, names: list[str]) -> None:
        self.names = names
        super().__init__("Input required and not supplied: " + ", ".join(names))


class MissingSpecError(InputError):
    def __init__(self) -> None:
        super().__init__("Either spec or spec-file input must be provided")


class NoCredentialsError(ActionError):
    def __init__(self) -> None:
        super().__init__(
            "One of yc-sa-json-credentials, yc-iam-token or yc-sa-id inputs must be provided"
        )


class MalformedCredentialsError(ActionError):
    pass


class IdentityTokenUnavailableError(ActionError):
    pass


class TokenExchangeError(ActionError):
    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


class ApiError(ActionError):
    """
    프로바이더 gRPC 호출 실패.

    Yandex Cloud 는 trailing metadata 로 x-request-id / x-server-trace-id 를 돌려주므로,
    진단 로그에 함께 남길 수 있도록 보관한다.
    """

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        request_id: Optional[str] = None,
        server_trace_id: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.request_id = request_id
        self.server_trace_id = server_trace_id

    @classmethod
    def from_rpc_error(cls, err: Exception) -> "ApiError":
        code = None
        details = str(err)
        metadata: dict[str, str] = {}

        # grpc.RpcError 자체에는 접근자가 없고, 실제 객체는 grpc.Call 도 구현한다.
        if hasattr(err, "code"):
            status = err.code()
            code = getattr(status, "name", str(status))
        if hasattr(err, "details"):
            details = err.details() or details
        if hasattr(err, "trailing_metadata"):
            for key, value in err.trailing_metadata() or ():
                metadata[key] = value

        message = f"{code}: {details}" if code else details
        return cls(
            message,
            code=code,
            request_id=metadata.get("x-request-id"),
            server_trace_id=metadata.get("x-server-trace-id"),
        )


class OperationFailedError(ActionError):
    def __init__(self, operation_id: str, code: int, message: str) -> None:
        self.operation_id = operation_id
        self.code = code
        super().__init__(
            f"Operation {operation_id} failed (code={code}): {message or 'no error message'}"
        )


class EmptyOperationResponseError(ActionError):
    def __init__(self, operation_id: str) -> None:
        self.operation_id = operation_id
        super().__init__(f"Operation {operation_id} finished without a response")
