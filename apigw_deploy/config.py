from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv

from .actions_context import ActionsContext
from .errors import ActionError, MissingInputError, MissingSpecError


ENV_FILES_DEFAULT_ORDER = [".env", ".env.local"]


def load_env_files(base_dir: str = ".",
                   files: Optional[List[str]] = None) -> None:
    """
    로컬 실행용으로 .env 계열 파일에서 INPUT_* 값을 로드한다.
    후순위 파일이 같은 키를 덮어쓴다. (러너에서는 보통 파일이 없다)
    """
    order = files or ENV_FILES_DEFAULT_ORDER
    for name in order:
        path = os.path.join(base_dir, name)
        if os.path.exists(path):
            load_dotenv(path, override=True)


@dataclass
class ActionInputs:
    # 필수
    folder_id: str
    gateway_name: str

    # 인증 (셋 중 하나, 우선순위 순서)
    sa_json_credentials: str = field(default="", repr=False)
    iam_token: str = field(default="", repr=False)
    sa_id: str = ""

    # 스펙 (둘 중 하나, 파일 우선)
    spec: str = field(default="", repr=False)
    spec_file: str = ""

    base_dir: str = "."

    @classmethod
    def from_context(cls, ctx: ActionsContext, base_dir: str = ".") -> "ActionInputs":
        missing: List[str] = []

        def req(name: str) -> str:
            val = ctx.get_input(name)
            if not val:
                missing.append(name)
            return val

        inputs = cls(
            folder_id=req("folder-id"),
            gateway_name=req("gateway-name"),
            sa_json_credentials=ctx.get_input("yc-sa-json-credentials"),
            iam_token=ctx.get_input("yc-iam-token"),
            sa_id=ctx.get_input("yc-sa-id"),
            spec=ctx.get_input("spec"),
            spec_file=ctx.get_input("spec-file"),
            base_dir=base_dir,
        )

        if missing:
            raise MissingInputError(missing)

        return inputs

    def resolve_spec(self) -> str:
        """
        spec-file 이 지정되어 있으면 파일 내용을, 아니면 inline spec 을 사용한다.
        둘 다 없으면 네트워크 호출 전에 실패한다.
        """
        if self.spec_file:
            path = os.path.join(self.base_dir, self.spec_file)
            try:
                with open(path, "rb") as f:
                    return f.read().decode("utf-8")
            except (OSError, UnicodeDecodeError) as e:
                raise ActionError(f"Could not read spec-file {self.spec_file}: {e}") from e
        if self.spec:
            return self.spec
        raise MissingSpecError()
