"""
apigw_deploy
------------

Yandex Cloud Serverless API Gateway 배포용 GitHub Action 패키지.
이름으로 게이트웨이를 찾아 OpenAPI 스펙을 업데이트하거나, 없으면 새로 생성한다.
"""

__all__ = [
    "actions_context",
    "cli",
    "config",
    "credentials",
    "errors",
    "gateway_client",
    "orchestrator",
    "reconciler",
    "token_exchange",
]
