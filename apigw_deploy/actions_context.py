"""
actions_context
---------------

GitHub Actions 러너와의 입출력 규약을 한 곳에 모은 모듈.

- 입력: INPUT_<NAME> 환경변수
- 출력: $GITHUB_OUTPUT 파일 (없으면 ::set-output 워크플로 커맨드)
- 실패: ::error:: 커맨드 + exit code 1
- OIDC 토큰: ACTIONS_ID_TOKEN_REQUEST_URL / ACTIONS_ID_TOKEN_REQUEST_TOKEN

전역 상태 대신 orchestrator 에 명시적으로 주입해서 사용한다.
"""

from __future__ import annotations

import os
import uuid
from typing import Dict, Mapping, Optional, Tuple

import click
import httpx

from .errors import ActionError, IdentityTokenUnavailableError, MissingInputError
from .logging_utils import get_logger


logger = get_logger(__name__)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


class ActionsContext:
    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        *,
        transport: Optional[httpx.BaseTransport] = None,
        timeout: float = 30.0,
    ) -> None:
        self._environ = environ if environ is not None else os.environ
        self._transport = transport
        self._timeout = timeout
        self.outputs: Dict[str, str] = {}
        self.exit_code = 0

    @property
    def failed(self) -> bool:
        return self.exit_code != 0

    def get_input(self, name: str, *, required: bool = False) -> str:
        key = "INPUT_" + name.replace(" ", "_").upper()
        # composite 액션의 bash 단계에서는 하이픈 대신 밑줄 이름으로 넘긴다.
        raw = self._environ.get(key) or self._environ.get(key.replace("-", "_")) or ""
        value = raw.strip()
        if required and not value:
            raise MissingInputError([name])
        return value

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value
        output_file = self._environ.get("GITHUB_OUTPUT")
        if output_file:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            with open(output_file, "a", encoding="utf-8") as f:
                f.write(f"{name}<<{delimiter}\n{value}\n{delimiter}\n")
            return
        click.echo(f"::set-output name={_escape_property(name)}::{_escape_data(value)}")

    def set_failed(self, message: str) -> None:
        self.exit_code = 1
        click.echo(f"::error::{_escape_data(message)}")

    def repo(self) -> Tuple[str, str]:
        """GITHUB_REPOSITORY(owner/repo) 를 (owner, repo) 로 나눠 반환한다."""
        raw = self._environ.get("GITHUB_REPOSITORY", "")
        owner, _, repo = raw.partition("/")
        if not owner or not repo:
            raise ActionError(
                "GITHUB_REPOSITORY environment variable like 'owner/repo' is required"
            )
        return owner, repo

    def get_id_token(self) -> str:
        """
        러너가 발급하는 OIDC identity token 을 받아온다. audience 는 GitHub 기본값을 쓴다.
        워크플로에 `permissions: id-token: write` 가 없으면 관련 env 가 비어 있다.
        """
        url = self._environ.get("ACTIONS_ID_TOKEN_REQUEST_URL")
        request_token = self._environ.get("ACTIONS_ID_TOKEN_REQUEST_TOKEN")
        if not url or not request_token:
            raise IdentityTokenUnavailableError(
                "Unable to get ACTIONS_ID_TOKEN_REQUEST_URL or ACTIONS_ID_TOKEN_REQUEST_TOKEN "
                "env variable; make sure the workflow has 'id-token: write' permission"
            )

        logger.debug("OIDC identity token 요청")
        try:
            with httpx.Client(transport=self._transport, timeout=self._timeout) as client:
                resp = client.get(
                    url,
                    headers={"Authorization": f"Bearer {request_token}"},
                )
        except httpx.HTTPError as e:
            raise IdentityTokenUnavailableError(f"Failed to get ID token: {e}") from e

        if resp.status_code != 200:
            raise IdentityTokenUnavailableError(
                f"Failed to get ID token: {resp.status_code} {resp.reason_phrase}"
            )
        try:
            body = resp.json()
        except ValueError:
            body = {}
        value = body.get("value") if isinstance(body, dict) else None
        if not value:
            raise IdentityTokenUnavailableError("Response json body does not have ID token field")
        return value
