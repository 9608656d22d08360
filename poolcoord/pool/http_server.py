"""HTTP endpoint accepting found-block reports from the pool backend.

Runs as an async task in the coordinator's event loop. Routes:
  POST /submit - submit a proof report and its payouts
"""

from __future__ import annotations

import json

import bittensor as bt
from aiohttp import web
from pydantic import ValidationError

from poolcoord.ledger.models import ProofReport

from .submission import SubmissionOrchestrator

DEFAULT_PORT = 22123


class SubmissionHTTPServer:
    """Lightweight async HTTP server in front of the orchestrator."""

    def __init__(
        self,
        orchestrator: SubmissionOrchestrator,
        host: str = "0.0.0.0",
        port: int = DEFAULT_PORT,
    ):
        self.orchestrator = orchestrator
        self.host = host
        self.port = port
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/submit", self._handle_submit)
        return app

    async def start(self) -> None:
        """Start the HTTP server."""
        self._app = self._build_app()
        self._runner = web.AppRunner(self._app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self.host, self.port)
        await site.start()
        bt.logging.info({"submission_http": {"status": "started", "port": self.port}})

    async def stop(self) -> None:
        """Stop the HTTP server."""
        if self._runner:
            await self._runner.cleanup()
            bt.logging.info({"submission_http": "stopped"})

    async def _handle_submit(self, request: web.Request) -> web.Response:
        bt.logging.debug({"submission_request": {"endpoint": "submit", "peer": request.remote}})
        try:
            body = await request.json()
            report = ProofReport.model_validate(body)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            bt.logging.warning({"submission_request": {"endpoint": "submit", "status": 400, "error": str(e)}})
            return web.json_response({"message": "sent a bad submission"}, status=400)

        result = await self.orchestrator.submit(report)
        bt.logging.info({
            "submission_request": {
                "endpoint": "submit",
                "sha": report.sha,
                "status": result.status,
                "attempts": result.attempts,
                "hash_rate": report.hash_rate,
            }
        })
        return web.json_response(result.to_json(), status=result.status)


__all__ = ["DEFAULT_PORT", "SubmissionHTTPServer"]
