from __future__ import annotations

from typing import Callable, List, Optional

from yandex.cloud.serverless.apigateway.v1.apigateway_pb2 import ApiGateway

from .actions_context import ActionsContext
from .config import ActionInputs
from .credentials import SessionConfig, resolve_session
from .errors import ActionError, ApiError, InputError
from .gateway_client import GatewayClient, YandexGatewayClient
from .logging_utils import get_logger
from .reconciler import find_by_name, reconcile
from .token_exchange import TokenExchangeClient


logger = get_logger(__name__)

ClientFactory = Callable[[SessionConfig], GatewayClient]


def _pick_existing(gateways: List[ApiGateway], name: str) -> Optional[ApiGateway]:
    if not gateways:
        return None
    if len(gateways) > 1:
        # 이름 중복은 프로바이더가 막아준다는 보장이 없다. 첫 번째만 사용한다.
        logger.warning(
            "이름이 %s 인 게이트웨이가 %d 개 있습니다. 첫 번째(id=%s)만 사용합니다.",
            name,
            len(gateways),
            gateways[0].id,
        )
    return gateways[0]


def _connect(
    ctx: ActionsContext,
    inputs: ActionInputs,
    client_factory: ClientFactory,
    exchanger: Optional[TokenExchangeClient],
) -> GatewayClient:
    session = resolve_session(inputs, ctx, exchanger)
    return client_factory(session)


def run(
    ctx: ActionsContext,
    *,
    base_dir: str = ".",
    client_factory: ClientFactory = YandexGatewayClient.from_session,
    exchanger: Optional[TokenExchangeClient] = None,
) -> None:
    """
    입력을 읽고 게이트웨이를 생성/업데이트한 뒤 id, domain 을 출력으로 남긴다.

    결과는 ctx 의 출력과 실패 표시로만 전달한다. 오류가 나면 출력은 하나도 남기지 않는다.
    """
    logger.info("start")
    try:
        inputs = ActionInputs.from_context(ctx, base_dir)
        spec = inputs.resolve_spec()
        logger.info("Folder ID: %s, gateway name: %s", inputs.folder_id, inputs.gateway_name)

        client = _connect(ctx, inputs, client_factory, exchanger)
        existing = _pick_existing(
            find_by_name(client, inputs.folder_id, inputs.gateway_name),
            inputs.gateway_name,
        )
        repository = None if existing is not None else ctx.repo()
        gateway = reconcile(
            client,
            inputs.folder_id,
            inputs.gateway_name,
            spec,
            existing,
            repository=repository,
        )
    except InputError as e:
        ctx.set_failed(str(e))
        return
    except ApiError as e:
        logger.error(
            "API 호출 실패: %s (request_id=%s, server_trace_id=%s)",
            e,
            e.request_id,
            e.server_trace_id,
        )
        ctx.set_failed(str(e))
        return
    except ActionError as e:
        logger.error("%s", e)
        ctx.set_failed(str(e))
        return
    except Exception as e:  # noqa: BLE001
        logger.exception("예상치 못한 오류 발생")
        ctx.set_failed(str(e))
        return

    ctx.set_output("id", gateway.id)
    ctx.set_output("domain", gateway.domain)


def plan(
    ctx: ActionsContext,
    *,
    base_dir: str = ".",
    client_factory: ClientFactory = YandexGatewayClient.from_session,
    exchanger: Optional[TokenExchangeClient] = None,
) -> str:
    """
    조회만 수행하고 생성/업데이트 중 무엇이 일어날지 요약 텍스트를 리턴한다.
    리소스 변경이나 출력 설정은 하지 않는다.
    """
    inputs = ActionInputs.from_context(ctx, base_dir)
    spec = inputs.resolve_spec()
    client = _connect(ctx, inputs, client_factory, exchanger)
    gateways = find_by_name(client, inputs.folder_id, inputs.gateway_name)
    existing = _pick_existing(gateways, inputs.gateway_name)

    lines: List[str] = []
    lines.append("# API gateway plan")
    lines.append(f"- folder: {inputs.folder_id}")
    lines.append(f"- gateway: {inputs.gateway_name}")
    lines.append(f"- spec: {inputs.spec_file or '(inline)'} ({len(spec)} chars)")
    lines.append("")
    lines.append("## Action")
    if existing is not None:
        lines.append(f"- UPDATE openapi_spec of {existing.id} ({existing.domain})")
        if len(gateways) > 1:
            lines.append(f"- ignored duplicates: {', '.join(g.id for g in gateways[1:])}")
    else:
        lines.append("- CREATE new gateway")
    return "\n".join(lines)
