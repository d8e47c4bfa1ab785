"""
Executes HTTP calls against stored API integrations.

Every invocation is logged as an ApiCall row: created as ``pending`` before
the first attempt and finalised with the outcome, attempt count and
duration once retries are exhausted.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx
from sqlalchemy.orm import Session

from synapse_bpm.config import settings
from synapse_bpm.core.exceptions import IntegrationError
from synapse_bpm.models import ApiCall, ApiIntegration
from synapse_bpm.schemas.integration import REDACTED
from synapse_bpm.services.integration_service import create_api_call, update_api_call

logger = logging.getLogger(__name__)

MAX_STORED_TEXT = 10_000


class IntegrationClient:
    """HTTP client honouring an integration's auth, headers, timeout and retry policy."""

    def __init__(
        self,
        transport: httpx.AsyncBaseTransport | None = None,
        backoff_seconds: float | None = None,
    ):
        self.transport = transport
        self.backoff_seconds = (
            settings.integration_retry_backoff_seconds if backoff_seconds is None else backoff_seconds
        )

    @staticmethod
    def build_url(integration: ApiIntegration, endpoint: str) -> str:
        base = integration.base_url.rstrip("/")
        path = (endpoint or "").strip()
        if not path:
            return base
        return f"{base}/{path.lstrip('/')}"

    @staticmethod
    def build_headers(integration: ApiIntegration, extra: dict[str, str] | None = None) -> dict[str, str]:
        headers: dict[str, str] = dict(integration.headers or {})
        headers.update(extra or {})

        auth_config = integration.auth_config or {}
        if integration.auth_type == "bearer" and auth_config.get("token"):
            headers["Authorization"] = f"Bearer {auth_config['token']}"
        elif integration.auth_type == "api_key" and auth_config.get("key"):
            headers[auth_config.get("header") or "X-API-Key"] = str(auth_config["key"])
        return headers

    @staticmethod
    def build_auth(integration: ApiIntegration) -> httpx.BasicAuth | None:
        if integration.auth_type != "basic":
            return None
        auth_config = integration.auth_config or {}
        return httpx.BasicAuth(auth_config.get("username", ""), auth_config.get("password", ""))

    @staticmethod
    def _redact(integration: ApiIntegration, headers: dict[str, str]) -> dict[str, str]:
        secret_names = {"authorization"}
        if integration.auth_type == "api_key":
            secret_names.add(((integration.auth_config or {}).get("header") or "X-API-Key").lower())
        return {k: (REDACTED if k.lower() in secret_names else v) for k, v in headers.items()}

    @staticmethod
    def _response_body(response: httpx.Response) -> Any:
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return {"text": response.text[:MAX_STORED_TEXT]}

    def _finish(
        self,
        db: Session,
        call: ApiCall,
        response: httpx.Response | None,
        error: str | None,
        attempts: int,
        started: float,
    ) -> ApiCall:
        duration = int((time.perf_counter() - started) * 1000)
        changes: dict[str, Any] = {"attempts": max(attempts, 1), "duration": duration}
        if response is not None:
            changes.update(
                {
                    "response_status": response.status_code,
                    "response_headers": dict(response.headers),
                    "response_body": self._response_body(response),
                }
            )
        if response is not None and response.status_code < 400 and error is None:
            changes["status"] = "success"
        else:
            changes["status"] = "failed"
            changes["error_message"] = error or f"HTTP {response.status_code}"

        logger.info(
            "API call %s %s finished: %s after %s attempt(s) in %sms",
            call.method, call.endpoint, changes["status"], changes["attempts"], duration,
        )
        return update_api_call(db, call.id, changes) or call

    async def execute(self, db: Session, integration: ApiIntegration, request: dict[str, Any]) -> ApiCall:
        if not integration.is_active:
            raise IntegrationError(f'Integration "{integration.name}" is inactive')

        method = request.get("method", "GET")
        endpoint = request.get("endpoint", "")
        body = request.get("body")
        headers = self.build_headers(integration, request.get("headers"))
        auth = self.build_auth(integration)
        url = self.build_url(integration, endpoint)

        call = create_api_call(
            db,
            {
                "integration_id": integration.id,
                "workflow_instance_id": request.get("workflow_instance_id"),
                "task_id": request.get("task_id"),
                "method": method,
                "endpoint": endpoint or "/",
                "request_headers": self._redact(integration, headers),
                "request_body": body,
            },
        )

        max_attempts = max(0, integration.retry_attempts or 0) + 1
        timeout = (integration.timeout or 30000) / 1000
        response: httpx.Response | None = None
        error: str | None = None
        attempts = 0
        started = time.perf_counter()

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                while attempts < max_attempts:
                    attempts += 1
                    response, error = None, None
                    try:
                        response = await client.request(
                            method,
                            url,
                            headers=headers,
                            json=body,
                            auth=auth,
                        )
                    except httpx.InvalidURL as exc:
                        error = f"Invalid URL {url}: {exc}"
                        break
                    except UnicodeEncodeError as exc:
                        # httpx only encodes ASCII header names and values
                        error = f"Invalid request headers: {exc}"
                        break
                    except httpx.HTTPError as exc:
                        error = f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__
                        logger.warning(
                            "API call %s %s attempt %s/%s failed: %s",
                            method, url, attempts, max_attempts, error,
                        )
                    else:
                        if response.status_code < 500:
                            break
                        error = f"HTTP {response.status_code}"
                        logger.warning(
                            "API call %s %s attempt %s/%s returned %s",
                            method, url, attempts, max_attempts, response.status_code,
                        )

                    if attempts < max_attempts:
                        update_api_call(db, call.id, {"status": "retrying", "attempts": attempts})
                        if self.backoff_seconds:
                            await asyncio.sleep(self.backoff_seconds * attempts)
        except Exception as exc:
            logger.exception("API call %s %s aborted", method, url)
            self._finish(db, call, None, f"{type(exc).__name__}: {exc}", attempts, started)
            raise

        return self._finish(db, call, response, error, attempts, started)


def get_integration_client() -> IntegrationClient:
    """FastAPI dependency; tests override it with a mock transport."""
    return IntegrationClient()
