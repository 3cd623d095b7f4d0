import httpx
import pytest

from apigw_deploy.actions_context import ActionsContext
from apigw_deploy.errors import ActionError, IdentityTokenUnavailableError, MissingInputError


def test_get_input_trims_and_accepts_underscore_names() -> None:
    ctx = ActionsContext(environ={"INPUT_FOLDER-ID": "  folderid \n", "INPUT_GATEWAY_NAME": "gw"})

    assert ctx.get_input("folder-id") == "folderid"
    assert ctx.get_input("gateway-name") == "gw"
    assert ctx.get_input("spec") == ""


def test_get_input_required() -> None:
    with pytest.raises(MissingInputError):
        ActionsContext(environ={}).get_input("folder-id", required=True)


def test_set_output_appends_to_github_output_file(tmp_path) -> None:
    output_file = tmp_path / "output"
    ctx = ActionsContext(environ={"GITHUB_OUTPUT": str(output_file)})

    ctx.set_output("id", "apigatewayid")
    ctx.set_output("domain", "domain")

    lines = output_file.read_text(encoding="utf-8").splitlines()
    assert lines[0].startswith("id<<ghadelimiter_")
    assert lines[1] == "apigatewayid"
    assert lines[2] == lines[0].split("<<", 1)[1]
    assert lines[4] == "domain"
    assert ctx.outputs == {"id": "apigatewayid", "domain": "domain"}


def test_set_output_without_file_uses_workflow_command(capsys: pytest.CaptureFixture) -> None:
    ActionsContext(environ={}).set_output("domain", "d5d.apigw.yandexcloud.net")

    assert "::set-output name=domain::d5d.apigw.yandexcloud.net" in capsys.readouterr().out


def test_set_failed_marks_exit_code(capsys: pytest.CaptureFixture) -> None:
    ctx = ActionsContext(environ={})

    ctx.set_failed("line1\nline2")

    assert ctx.failed
    assert ctx.exit_code == 1
    assert "::error::line1%0Aline2" in capsys.readouterr().out


def test_repo_parses_github_repository() -> None:
    assert ActionsContext(environ={"GITHUB_REPOSITORY": "owner/repo"}).repo() == ("owner", "repo")
    with pytest.raises(ActionError):
        ActionsContext(environ={}).repo()


def test_get_id_token_keeps_request_url_query() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"value": "oidc"})

    ctx = ActionsContext(
        environ={
            "ACTIONS_ID_TOKEN_REQUEST_URL": "https://token.actions.example/?api-version=2.0",
            "ACTIONS_ID_TOKEN_REQUEST_TOKEN": "request-token",
        },
        transport=httpx.MockTransport(handler),
    )

    assert ctx.get_id_token() == "oidc"
    assert str(seen[0].url) == "https://token.actions.example/?api-version=2.0"
    assert seen[0].headers["Authorization"] == "Bearer request-token"


def test_get_id_token_failure_status() -> None:
    ctx = ActionsContext(
        environ={
            "ACTIONS_ID_TOKEN_REQUEST_URL": "https://token.actions.example/",
            "ACTIONS_ID_TOKEN_REQUEST_TOKEN": "request-token",
        },
        transport=httpx.MockTransport(lambda request: httpx.Response(500)),
    )

    with pytest.raises(IdentityTokenUnavailableError) as excinfo:
        ctx.get_id_token()

    assert "500" in str(excinfo.value)
