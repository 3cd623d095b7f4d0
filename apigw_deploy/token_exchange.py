"""
token_exchange
--------------

CI 러너가 발급한 OIDC 토큰을 서비스 계정 IAM 토큰으로 교환하는 모듈.
재시도 없이 단 한 번만 호출한다.
"""

from __future__ import annotations

from typing import Optional

import httpx

from .errors import TokenExchangeError
from .logging_utils import get_logger


logger = get_logger(__name__)

TOKEN_EXCHANGE_URL = "https://auth.yandex.cloud/oauth/token"

GRANT_TYPE = "urn:ietf:params:oauth:grant-type:token-exchange"
REQUESTED_TOKEN_TYPE = "urn:ietf:params:oauth:token-type:access_token"
SUBJECT_TOKEN_TYPE = "urn:ietf:params:oauth:token-type:id_token"


class TokenExchangeClient:
    def __init__(
        self,
        url: str = TOKEN_EXCHANGE_URL,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self._url = url
        self._transport = transport
        self._timeout = timeout

    def exchange(self, identity_token: str, service_account_id: str) -> str:
        logger.info("서비스 계정 %s 에 대한 토큰 교환을 요청합니다.", service_account_id)
        data = {
            "grant_type": GRANT_TYPE,
            "requested_token_type": REQUESTED_TOKEN_TYPE,
            "audience": service_account_id,
            "subject_token": identity_token,
            "subject_token_type": SUBJECT_TOKEN_TYPE,
        }

        try:
            with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
                resp = client.post(self._url, data=data)
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Token exchange request failed: {e}") from e

        if resp.status_code != 200:
            raise TokenExchangeError(
                f"Token exchange failed with status {resp.status_code}: {resp.reason_phrase}",
                status_code=resp.status_code,
            )

        try:
            body = resp.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        token = body.get("access_token")
        if not token:
            error_code = body.get("error")
            raise TokenExchangeError(
                f"Token exchange failed: {error_code}: {body.get('error_description')}",
                status_code=resp.status_code,
                error_code=error_code,
            )

        logger.debug("토큰 교환 성공")
        return token
