"""
pytest 설정:

로컬 작업 환경에 설치된 다른 버전의 apigw_deploy 패키지가 존재할 때,
`pytest` 실행 시 site-packages 쪽이 먼저 import 되어 테스트가 깨질 수 있다.
테스트는 항상 현재 레포의 소스를 대상으로 해야 하므로, repo root 를 sys.path 최상단에 고정한다.

SDK 호출은 FakeGatewayClient 로 대체한다. 응답은 실제 protobuf Operation 메시지로 만든다.
"""

from __future__ import annotations

import os
import sys
from typing import Dict, List, Tuple

import pytest
from google.protobuf.any_pb2 import Any
from google.rpc.status_pb2 import Status
from yandex.cloud.operation.operation_pb2 import Operation
from yandex.cloud.serverless.apigateway.v1.apigateway_pb2 import ApiGateway
from yandex.cloud.serverless.apigateway.v1.apigateway_service_pb2 import ListApiGatewayResponse


def pytest_configure() -> None:
    repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if repo_root not in sys.path:
        sys.path.insert(0, repo_root)


SA_JSON_CREDENTIALS = """{
  "id": "id",
  "created_at": "2021-01-01T00:00:00Z",
  "key_algorithm": "RSA_2048",
  "service_account_id": "service_account_id",
  "private_key": "private_key",
  "public_key": "public_key"
}"""


class FakeGatewayClient:
    def __init__(self, gateways=(), *, create_fail: bool = False, update_fail: bool = False) -> None:
        self.gateways = list(gateways)
        self.create_fail = create_fail
        self.update_fail = update_fail
        self.calls: List[Tuple[str, object]] = []

    def _operation(self, fail: bool):
        if fail:
            return Operation(id="operationid", done=True, error=Status(code=13, message="internal"))

        response = Any()
        response.Pack(
            ApiGateway(
                id="apigatewayid",
                name="apigatewayname",
                folder_id="folderid",
                domain="domain",
            )
        )
        return Operation(id="operationid", done=True, response=response)

    def names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def list(self, request):
        self.calls.append(("list", request))
        return ListApiGatewayResponse(api_gateways=self.gateways)

    def create(self, request):
        self.calls.append(("create", request))
        return self._operation(self.create_fail)

    def update(self, request):
        self.calls.append(("update", request))
        return self._operation(self.update_fail)

    def wait(self, operation):
        self.calls.append(("wait", operation))
        return operation


@pytest.fixture
def make_client():
    return FakeGatewayClient


@pytest.fixture
def existing_gateway():
    return ApiGateway(
        id="apigatewayid",
        folder_id="folderid",
        name="gatewayname",
        description="description",
        domain="domain",
    )


@pytest.fixture
def action_env(tmp_path) -> Dict[str, str]:
    spec_file = tmp_path / "spec.yaml"
    spec_file.write_text("openapi: 3.0.0\n", encoding="utf-8")
    return {
        "INPUT_YC-SA-JSON-CREDENTIALS": SA_JSON_CREDENTIALS,
        "INPUT_FOLDER-ID": "folderid",
        "INPUT_GATEWAY-NAME": "gatewayname",
        "INPUT_SPEC-FILE": str(spec_file),
        "GITHUB_REPOSITORY": "some-owner/some-repo",
    }


@pytest.fixture
def sa_json_credentials() -> str:
    return SA_JSON_CREDENTIALS
