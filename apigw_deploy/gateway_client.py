"""
gateway_client
--------------

Serverless API Gateway 서비스 호출 인터페이스와 yandexcloud SDK 기반 구현.

reconciler 는 GatewayClient 프로토콜에만 의존하고,
테스트에서는 같은 프로토콜을 구현한 가짜 클라이언트를 주입한다.
"""

from __future__ import annotations

import time
from typing import Callable, Protocol, TypeVar

import grpc
import yandexcloud
from yandex.cloud.operation.operation_pb2 import Operation
from yandex.cloud.serverless.apigateway.v1.apigateway_service_pb2 import (
    CreateApiGatewayRequest,
    ListApiGatewayRequest,
    ListApiGatewayResponse,
    UpdateApiGatewayRequest,
)
from yandex.cloud.serverless.apigateway.v1.apigateway_service_pb2_grpc import (
    ApiGatewayServiceStub,
)

from .credentials import SessionConfig
from .errors import ApiError
from .logging_utils import get_logger


logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL = 1.0

T = TypeVar("T")


class GatewayClient(Protocol):
    def list(self, request: ListApiGatewayRequest) -> ListApiGatewayResponse: ...

    def create(self, request: CreateApiGatewayRequest) -> Operation: ...

    def update(self, request: UpdateApiGatewayRequest) -> Operation: ...

    def wait(self, operation: Operation) -> Operation: ...


class YandexGatewayClient:
    def __init__(
        self,
        sdk: yandexcloud.SDK,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._sdk = sdk
        self._gateways = sdk.client(ApiGatewayServiceStub)
        self._poll_interval = poll_interval
        self._sleep = sleep

    @classmethod
    def from_session(cls, session: SessionConfig) -> "YandexGatewayClient":
        return cls(yandexcloud.SDK(**session.sdk_kwargs()))

    def _call(self, method: Callable[..., T], request) -> T:  # noqa: ANN001
        try:
            return method(request)
        except grpc.RpcError as e:
            raise ApiError.from_rpc_error(e) from e

    def list(self, request: ListApiGatewayRequest) -> ListApiGatewayResponse:
        return self._call(self._gateways.List, request)

    def create(self, request: CreateApiGatewayRequest) -> Operation:
        return self._call(self._gateways.Create, request)

    def update(self, request: UpdateApiGatewayRequest) -> Operation:
        return self._call(self._gateways.Update, request)

    def wait(self, operation: Operation) -> Operation:
        """
        operation 이 done 이 될 때까지 SDK 의 operation waiter 로 폴링한다.
        waiter 가 UNAVAILABLE 등 일시적 오류의 재시도를 담당하고, 클라이언트 측 타임아웃은 두지 않는다.
        """
        if operation.done:
            return operation

        started = time.monotonic()
        waiter = self._sdk.waiter(operation.id)
        try:
            for _ in waiter:
                logger.debug(
                    "operation %s 대기 중 (%.1fs 경과)",
                    operation.id,
                    time.monotonic() - started,
                )
                self._sleep(self._poll_interval)
        except grpc.RpcError as e:
            raise ApiError.from_rpc_error(e) from e
        return waiter.operation
