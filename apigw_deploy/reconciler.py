"""
reconciler
----------

이름으로 게이트웨이를 찾고, 있으면 OpenAPI 스펙만 업데이트하고 없으면 새로 생성한다.
생성/업데이트는 long-running operation 이므로 완료까지 기다린 뒤 결과 리소스를 디코딩한다.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Tuple

from google.protobuf.field_mask_pb2 import FieldMask
from yandex.cloud.operation.operation_pb2 import Operation
from yandex.cloud.serverless.apigateway.v1.apigateway_pb2 import ApiGateway
from yandex.cloud.serverless.apigateway.v1.apigateway_service_pb2 import (
    CreateApiGatewayRequest,
    ListApiGatewayRequest,
    UpdateApiGatewayRequest,
)

from .errors import EmptyOperationResponseError, OperationFailedError
from .gateway_client import GatewayClient
from .logging_utils import get_logger


logger = get_logger(__name__)

LIST_PAGE_SIZE = 100
SPEC_FIELD_MASK = ["openapi_spec"]


@dataclass(frozen=True)
class GatewayResource:
    id: str
    name: str
    folder_id: str
    created_at: Optional[datetime]
    openapi_spec: str
    domain: str

    @classmethod
    def from_proto(cls, gateway: ApiGateway, openapi_spec: str = "") -> "GatewayResource":
        created_at = gateway.created_at.ToDatetime() if gateway.HasField("created_at") else None
        return cls(
            id=gateway.id,
            name=gateway.name,
            folder_id=gateway.folder_id,
            created_at=created_at,
            # ApiGateway 메시지에는 스펙 본문이 없어 호출 측에서 넘겨준다.
            openapi_spec=openapi_spec,
            domain=gateway.domain,
        )


def name_filter(name: str) -> str:
    # TODO: escape quotes in gateway names once the filter grammar's escaping rules are confirmed
    return f'name = "{name}"'


def find_by_name(client: GatewayClient, folder_id: str, name: str) -> List[ApiGateway]:
    """
    folder 안에서 이름이 정확히 일치하는 게이트웨이 목록을 반환한다.
    첫 페이지(최대 100개)만 조회한다.
    """
    response = client.list(
        ListApiGatewayRequest(
            folder_id=folder_id,
            page_size=LIST_PAGE_SIZE,
            filter=name_filter(name),
        )
    )
    return list(response.api_gateways)


def _wait_for_gateway(client: GatewayClient, operation: Operation) -> ApiGateway:
    logger.info("operation %s 완료를 기다립니다.", operation.id)
    operation = client.wait(operation)

    result = operation.WhichOneof("result")
    if result == "error":
        raise OperationFailedError(operation.id, operation.error.code, operation.error.message)
    if result != "response" or not operation.response.value:
        raise EmptyOperationResponseError(operation.id)

    gateway = ApiGateway()
    if not operation.response.Unpack(gateway):
        # 다른 타입의 응답이면 빈 리소스로 출력하지 않는다.
        raise EmptyOperationResponseError(operation.id)
    return gateway


def update_gateway_spec(client: GatewayClient, gateway_id: str, spec: str) -> ApiGateway:
    operation = client.update(
        UpdateApiGatewayRequest(
            api_gateway_id=gateway_id,
            openapi_spec=spec,
            update_mask=FieldMask(paths=SPEC_FIELD_MASK),
        )
    )
    return _wait_for_gateway(client, operation)


def create_gateway(
    client: GatewayClient,
    folder_id: str,
    name: str,
    spec: str,
    repository: Tuple[str, str],
) -> ApiGateway:
    owner, repo = repository
    operation = client.create(
        CreateApiGatewayRequest(
            folder_id=folder_id,
            name=name,
            description=f"Created from: {owner}/{repo}",
            openapi_spec=spec,
        )
    )
    return _wait_for_gateway(client, operation)


def reconcile(
    client: GatewayClient,
    folder_id: str,
    name: str,
    spec: str,
    existing: Optional[ApiGateway],
    repository: Optional[Tuple[str, str]] = None,
) -> GatewayResource:
    """
    existing 이 있으면 openapi_spec 필드만 업데이트, 없으면 생성한다.

    repository 는 생성 시 description 에 들어가는 (owner, repo) 이며 생성 경로에서만 필요하다.
    """
    if existing is not None:
        logger.info("게이트웨이 %s 가 이미 존재합니다 (id=%s). 스펙을 업데이트합니다.", name, existing.id)
        gateway = update_gateway_spec(client, existing.id, spec)
        logger.info("게이트웨이 업데이트 완료")
    else:
        if repository is None:
            raise ValueError("repository is required to create a gateway")
        logger.info("게이트웨이 %s 가 없어 새로 생성합니다.", name)
        gateway = create_gateway(client, folder_id, name, spec, repository)
        logger.info("게이트웨이 생성 완료: id=%s", gateway.id)

    return GatewayResource.from_proto(gateway, openapi_spec=spec)
