import sys

import click

from .actions_context import ActionsContext
from .config import load_env_files
from .errors import ActionError
from .logging_utils import running_in_actions, setup_logging, get_logger
from .orchestrator import plan as plan_gateway, run


logger = get_logger(__name__)


@click.group()
@click.option(
    "-C",
    "--chdir",
    "chdir",
    type=click.Path(file_okay=False, dir_okay=True, exists=True),
    default=".",
    help="작업 디렉토리. .env 파일과 상대 경로 spec-file 의 기준 (기본: 현재 디렉토리)",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="로그 레벨을 DEBUG로 올립니다.",
)
@click.pass_context
def main(ctx: click.Context, chdir: str, verbose: int) -> None:
    """Yandex Cloud API Gateway 배포 액션 CLI"""
    setup_logging(verbose)
    # 러너에서는 워크플로가 넘긴 INPUT_* 만 사용한다. 체크아웃된 레포의 .env 는 무시한다.
    if not running_in_actions():
        load_env_files(chdir)
    ctx.ensure_object(dict)
    ctx.obj["chdir"] = chdir
    ctx.obj["verbose"] = verbose


@main.command()
@click.pass_context
def deploy(ctx: click.Context) -> None:
    """게이트웨이를 생성하거나 OpenAPI 스펙을 업데이트하고 id/domain 을 출력"""
    actions = ActionsContext()
    run(actions, base_dir=ctx.obj["chdir"])

    # 실패 표시가 있으면 CI 에서 감지할 수 있도록 exit 1
    if actions.failed:
        sys.exit(actions.exit_code)


@main.command()
@click.pass_context
def plan(ctx: click.Context) -> None:
    """게이트웨이를 조회만 하고 생성/업데이트 중 어떤 동작을 할지 출력 (변경 없음)"""
    try:
        report = plan_gateway(ActionsContext(), base_dir=ctx.obj["chdir"])
    except ActionError as e:
        click.echo(f"[ERROR] {e}", err=True)
        sys.exit(1)
    except Exception as e:  # noqa: BLE001
        logger.exception("plan 중 오류 발생")
        click.echo(f"[ERROR] plan 실패: {e}", err=True)
        sys.exit(1)

    click.echo(report)
