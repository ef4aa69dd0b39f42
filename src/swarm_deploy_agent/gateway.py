"""Webhook HTTP surface."""

import secrets
from typing import Optional

import structlog
from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import PlainTextResponse, Response
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .executor.base import BaseExecutor, DeploymentResult
from .models import RuntimeConfig, WebhookPayload

logger = structlog.get_logger()

ACCESS_DENIED = "Access Denied: Token Invalid\n"

# Unmatched paths and methods answer like any other harmless request
UNROUTED_STATUS_CODES = (404, 405)


class WebhookGateway:
    """Authenticates webhook calls and drives the executor for configured images."""

    def __init__(self, runtime: RuntimeConfig, executor: BaseExecutor):
        self.runtime = runtime
        self.executor = executor

    def authenticate(self, token: Optional[str]) -> bool:
        """Exact match of ``token`` against the shared token."""
        if not token:
            return False
        return secrets.compare_digest(token.encode("utf-8"), self.runtime.shared_token.encode("utf-8"))

    async def process(self, body: bytes) -> Optional[DeploymentResult]:
        """Route an acknowledged push notification to a deployment.

        Runs after the HTTP response has been sent, so every outcome is
        only logged.

        Returns:
            DeploymentResult, or None when nothing was deployed
        """
        try:
            payload = WebhookPayload.model_validate_json(body)
        except ValidationError as e:
            logger.warning("webhook.payload_invalid", errors=e.error_count(), error=str(e))
            return None

        image = payload.image_ref()
        target = self.runtime.lookup(image)
        if target is None:
            logger.info(
                "webhook.image_not_configured",
                image=image.canonical,
                environment=self.runtime.environment_selector,
                message=f"Received update for {image!s} but not configured to handle updates for this image",
            )
            return None

        logger.info("webhook.deploying", image=image.canonical, service=target.name)
        try:
            result = await self.executor.deploy(
                image,
                target,
                require_auth=self.runtime.require_registry_auth,
                credentials=self.runtime.credentials,
            )
        except Exception as e:
            logger.error(
                "webhook.deploy_exception",
                image=image.canonical,
                service=target.name,
                error=str(e),
                exc_info=True,
            )
            return None

        logger.info(
            "webhook.deploy_finished",
            image=image.canonical,
            service=target.name,
            status=result.status,
            stage=result.stage.value,
        )
        return result


def create_app(runtime: RuntimeConfig, executor: BaseExecutor) -> FastAPI:
    """Build the webhook application.

    Args:
        runtime: Resolved runtime configuration
        executor: Executor that performs deployments

    Returns:
        FastAPI app
    """
    gateway = WebhookGateway(runtime, executor)

    # No docs or schema routes: only the webhook path behaves differently
    app = FastAPI(
        title="Swarm Deploy Agent",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    @app.exception_handler(StarletteHTTPException)
    async def unrouted(request: Request, exc: StarletteHTTPException):
        if exc.status_code in UNROUTED_STATUS_CODES:
            return Response(status_code=200)
        return await http_exception_handler(request, exc)

    # The whole remainder is the token, so tokens may contain "/"
    @app.post("/webhook/{token:path}")
    async def webhook(token: str, request: Request, background_tasks: BackgroundTasks):
        """Acknowledge a push notification and deploy in the background."""
        if not gateway.authenticate(token):
            logger.info("webhook.invalid_token", message="Webhook called with invalid or missing token")
            return PlainTextResponse(ACCESS_DENIED, status_code=401)

        body = await request.body()
        background_tasks.add_task(gateway.process, body)
        return PlainTextResponse("OK")

    @app.post("/webhook")
    async def webhook_without_token():
        logger.info("webhook.invalid_token", message="Webhook called with invalid or missing token")
        return PlainTextResponse(ACCESS_DENIED, status_code=401)

    return app
