"""
credentials
-----------

세 가지 인증 입력 중 하나를 골라 SDK 세션 설정으로 변환한다.

우선순위: 서비스 계정 JSON 키 > IAM 토큰 > 서비스 계정 ID(OIDC 토큰 교환)
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .actions_context import ActionsContext
from .config import ActionInputs
from .errors import MalformedCredentialsError, NoCredentialsError
from .logging_utils import get_logger
from .token_exchange import TokenExchangeClient


logger = get_logger(__name__)

REQUIRED_KEY_FIELDS = ("id", "service_account_id", "private_key")


@dataclass(frozen=True)
class ServiceAccountKey:
    raw: str = field(repr=False)


@dataclass(frozen=True)
class IamToken:
    token: str = field(repr=False)


@dataclass(frozen=True)
class ServiceAccountId:
    service_account_id: str


Credential = Union[ServiceAccountKey, IamToken, ServiceAccountId]


@dataclass(frozen=True)
class SessionConfig:
    service_account_key: Optional[Dict[str, Any]] = field(default=None, repr=False)
    iam_token: Optional[str] = field(default=None, repr=False)

    @property
    def kind(self) -> str:
        return "service_account_key" if self.service_account_key is not None else "iam_token"

    def sdk_kwargs(self) -> Dict[str, Any]:
        """yandexcloud.SDK 생성자에 그대로 넘길 인자."""
        if self.service_account_key is not None:
            return {"service_account_key": dict(self.service_account_key)}
        return {"iam_token": self.iam_token}


def credential_from_inputs(inputs: ActionInputs) -> Credential:
    if inputs.sa_json_credentials:
        return ServiceAccountKey(inputs.sa_json_credentials)
    if inputs.iam_token:
        return IamToken(inputs.iam_token)
    if inputs.sa_id:
        return ServiceAccountId(inputs.sa_id)
    raise NoCredentialsError()


def parse_service_account_key(raw: str) -> Dict[str, Any]:
    try:
        key = json.loads(raw)
    except json.JSONDecodeError as e:
        raise MalformedCredentialsError(f"yc-sa-json-credentials is not valid JSON: {e.msg}") from e

    if not isinstance(key, dict):
        raise MalformedCredentialsError("yc-sa-json-credentials must be a JSON object")

    missing = [name for name in REQUIRED_KEY_FIELDS if not key.get(name)]
    if missing:
        raise MalformedCredentialsError(
            "yc-sa-json-credentials is missing fields: " + ", ".join(missing)
        )
    return key


def resolve_session(
    inputs: ActionInputs,
    ctx: ActionsContext,
    exchanger: Optional[TokenExchangeClient] = None,
) -> SessionConfig:
    credential = credential_from_inputs(inputs)

    if isinstance(credential, ServiceAccountKey):
        key = parse_service_account_key(credential.raw)
        logger.info("서비스 계정 키로 인증합니다: service_account_id=%s", key["service_account_id"])
        return SessionConfig(service_account_key=key)

    if isinstance(credential, IamToken):
        logger.info("IAM 토큰으로 인증합니다.")
        return SessionConfig(iam_token=credential.token)

    logger.info("OIDC 토큰을 서비스 계정 %s 의 IAM 토큰으로 교환합니다.", credential.service_account_id)
    identity_token = ctx.get_id_token()
    exchanger = exchanger or TokenExchangeClient()
    token = exchanger.exchange(identity_token, credential.service_account_id)
    return SessionConfig(iam_token=token)
