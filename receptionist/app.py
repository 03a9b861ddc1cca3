"""FastAPI application: call-control webhook for the phone receptionist.

Endpoints:

  POST /webhook   Call-control webhook: returns the command list for this turn
  GET  /webhook   Plain liveness text for the platform's URL check
  GET  /health    Health check, including calendar readiness

The call flow:
  1. ``call.initiated`` arrives, we greet the caller and gather speech
  2. ``call.gather.ended`` arrives with a transcript, we classify it and
     answer, transfer, or book an appointment
  3. Anything else is acknowledged with an empty command list
"""

from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import json
import logging
import time

# Configure root logger early so all app loggers are visible when run
# via `uvicorn receptionist.app:app`.
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)-20s %(levelname)-7s %(message)s",
)

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from receptionist.calendar_gateway import CalendarGateway, init_calendar_gateway
from receptionist.config import Settings, settings as default_settings
from receptionist.dialogue.orchestrator import DialogueOrchestrator
from receptionist.dialogue.responses import compile_outcome
from receptionist.dialogue.scheduler import SchedulingEngine
from receptionist.models.events import OtherEvent, parse_call_event

log = logging.getLogger("receptionist.app")

_START_TIME = time.time()


def create_app(
    settings: Settings | None = None,
    gateway: CalendarGateway | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    The calendar gateway is built here, once per process, and handed to
    the scheduling engine. Tests pass their own ``settings``/``gateway``.
    """
    settings = settings or default_settings

    for warning in settings.validate_startup():
        log.warning(warning)

    if gateway is None:
        gateway = init_calendar_gateway(settings)

    scheduler = SchedulingEngine(gateway=gateway, settings=settings)
    orchestrator = DialogueOrchestrator(settings=settings, scheduler=scheduler)

    app = FastAPI(
        title="Phone Receptionist",
        description="Call-control webhook with scripted dialogue and calendar booking",
        version="0.1.0",
    )
    app.state.orchestrator = orchestrator
    app.state.calendar_gateway = gateway

    # ── Health check ───────────────────────────────────────────

    @app.get("/health")
    async def health() -> JSONResponse:
        """Lightweight health check, confirms the event loop is responsive."""
        uptime = round(time.time() - _START_TIME, 1)
        return JSONResponse(
            {"status": "ok", "uptime": uptime, "calendar_ready": gateway.ready}
        )

    # ── Call-control webhook ───────────────────────────────────

    @app.get("/webhook")
    async def webhook_hello() -> JSONResponse:
        return JSONResponse({"message": "Hello from Telnyx Webhook"})

    @app.post("/webhook")
    async def webhook(request: Request) -> JSONResponse:
        """Handle one call turn and reply with the command list.

        Always answers 200. A body that is not JSON is acknowledged like
        any other event the dialogue does not act on.
        """
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            log.warning("Webhook body is not valid JSON")
            event = OtherEvent(event_type="invalid")
        else:
            event = parse_call_event(body)

        outcome = await orchestrator.handle(event)
        log.info("Turn outcome: %s", type(outcome).__name__)
        return JSONResponse(compile_outcome(outcome, settings))

    return app


# ── Module-level app instance for uvicorn ──────────────────────

app = create_app()


if __name__ == "__main__":
    import uvicorn

    log_config = uvicorn.config.LOGGING_CONFIG
    log_config["formatters"]["default"]["fmt"] = (
        "%(asctime)s %(name)-12s %(levelname)-8s %(message)s"
    )

    uvicorn.run(
        "receptionist.app:app",
        host=default_settings.host,
        port=default_settings.port,
        reload=default_settings.debug,
        log_config=log_config,
    )
