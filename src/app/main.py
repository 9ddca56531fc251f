"""Definition of FastAPI based web service."""

import os
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from llama_stack_client import APIConnectionError
from starlette.routing import Mount, Route, WebSocketRoute

import metrics
import version
from app import routers
from app.state import app_state
from client import AsyncLlamaStackClientHolder
from configuration import configuration
from log import get_logger

logger = get_logger(__name__)

logger.info("Initializing app")

# each uvicorn worker is a separate process that needs to load configuration
if not configuration.is_loaded():
    configuration.load_configuration(os.environ["LIFE_COACH_CONFIG_PATH"])
app_state.mark_check_complete("configuration_loaded", True)

service_name = configuration.configuration.name


# running on FastAPI startup
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """
    Initialize app resources.

    FastAPI lifespan context: initializes Llama Stack client and optionally
    fills the document cache before serving requests.
    """
    try:
        await AsyncLlamaStackClientHolder().load(
            configuration.llama_stack_configuration,
            timeout=configuration.inference.timeout,
        )
        app_state.mark_check_complete("llama_client_initialized", True)
    except (ValueError, APIConnectionError) as e:
        app_state.mark_check_complete("llama_client_initialized", False, str(e))
        raise

    if configuration.document_cache_configuration.warm_on_startup:
        logger.info("Warming document cache")
        await configuration.document_cache.ensure_fresh()

    app_state.mark_initialization_complete()
    logger.info("App startup complete")

    yield

    await AsyncLlamaStackClientHolder().close()


app = FastAPI(
    title=f"{service_name} service - OpenAPI",
    summary=f"{service_name} service API specification.",
    description=f"{service_name} service API specification.",
    version=version.__version__,
    license_info={
        "name": "Apache 2.0",
        "url": "https://www.apache.org/licenses/LICENSE-2.0.html",
    },
    servers=[
        {"url": "http://localhost:8080/", "description": "Locally running service"}
    ],
    lifespan=lifespan,
)

cors = configuration.service_configuration.cors

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.allow_origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)


@app.middleware("")
async def rest_api_metrics(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Middleware with REST API counter update logic."""
    path = request.url.path
    logger.debug("Received request for path: %s", path)

    # ignore paths that are not part of the app routes
    if path not in app_routes_paths:
        return await call_next(request)

    logger.debug("Processing API request for path: %s", path)

    # measure time to handle duration + update histogram
    with metrics.response_duration_seconds.labels(path).time():
        response = await call_next(request)

    # ignore /metrics endpoint that will be called periodically
    if not path.endswith("/metrics"):
        # just update metrics
        metrics.rest_api_calls_total.labels(path, response.status_code).inc()
    return response


logger.info("Including routers")
routers.include_routers(app)

app_routes_paths = [
    route.path
    for route in app.routes
    if isinstance(route, (Mount, Route, WebSocketRoute))
]
