import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.responses import ORJSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from config.config import Config
from config.logging_config import setup_logging
from contracts.probe_request import ProbeRequest
from contracts.probe_response import ProbeResponse
from core.client_ip import get_client_ip
from core.metrics_manager import MetricsManager
from core.prober import Prober
from core.server_ip_cache import ServerIPCache
from core.url_validator import validate_url

setup_logging()
logger = logging.getLogger(__name__)

metrics_manager = MetricsManager()

prober = Prober(
    timeout=Config.PROBE_TIMEOUT_SECONDS,
    body_limit=Config.BODY_PREVIEW_LIMIT,
    user_agent=Config.PROBE_USER_AGENT,
)

server_ip_cache = ServerIPCache(
    lookup_url=Config.SERVER_IP_LOOKUP_URL,
    timeout=Config.SERVER_IP_LOOKUP_TIMEOUT,
)


@asynccontextmanager
async def lifespan(app):
    await app.state.server_ip_cache.start()
    yield
    await app.state.server_ip_cache.stop()


app = FastAPI(lifespan=lifespan, default_response_class=ORJSONResponse)
app.state.prober = prober
app.state.server_ip_cache = server_ip_cache

app.middleware("http")(metrics_manager.prometheus_middleware)


def method_not_allowed():
    return PlainTextResponse("Method not allowed", status_code=405)


@app.post("/api/test")
@app.post("/test")
async def probe_url(request: Request):
    try:
        data = await request.json()
        # A JSON null body carries no URL; report it like an empty object.
        payload = ProbeRequest() if data is None else ProbeRequest.model_validate(data)
    except ValueError:
        # Covers malformed JSON and bodies that don't match ProbeRequest.
        return ORJSONResponse({"error": "Invalid JSON"}, status_code=400)

    reason = validate_url(payload.url)
    if reason:
        logger.info(f"Rejected URL {payload.url!r}: {reason}")
        return ORJSONResponse({"error": reason}, status_code=400)

    result = await request.app.state.prober.probe(payload.url)
    metrics_manager.record_probe(result)

    response = ProbeResponse.from_result(
        result,
        user_ip=get_client_ip(request),
        server_ip=request.app.state.server_ip_cache.get(),
    )
    return ORJSONResponse(response.to_payload())


API_WRONG_METHODS = ["GET", "HEAD", "PUT", "DELETE", "PATCH", "OPTIONS"]


@app.api_route("/api/test", methods=API_WRONG_METHODS)
@app.api_route("/test", methods=API_WRONG_METHODS)
async def probe_url_wrong_method():
    return method_not_allowed()


@app.get("/health")
async def health():
    return PlainTextResponse("OK")


@app.api_route("/health", methods=["HEAD", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"])
async def health_wrong_method():
    return method_not_allowed()


@app.get("/metrics")
def metrics():
    return Response(
        generate_latest(metrics_manager.registry), media_type=CONTENT_TYPE_LATEST
    )


# Mounted last so the API routes above take precedence.
if os.path.isdir(Config.STATIC_DIR):
    app.mount("/", StaticFiles(directory=Config.STATIC_DIR, html=True), name="static")
else:
    logger.warning(f"Static directory {Config.STATIC_DIR!r} not found; UI disabled.")

logger.info("URL tester server module loaded and logging is configured.")
