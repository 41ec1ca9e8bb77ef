import asyncio
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from nebula.api.endpoints import base, manifest
from nebula.api.endpoints import stream as streams_router
from nebula.core.database import (cleanup_expired_streams, setup_database,
                                  teardown_database)
from nebula.core.logger import logger
from nebula.services.trackers import tracker_list
from nebula.utils.http_client import http_client_manager


class LoguruMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(f"Exception during request processing: {e}")
            raise
        finally:
            process_time = time.time() - start_time
            logger.log(
                "API",
                f"{request.method} {request.url.path} - {response.status_code if 'response' in locals() else '500'} - {process_time:.2f}s",
            )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    await setup_database()
    await http_client_manager.init()
    await tracker_list.initialize()

    cleanup_streams_task = asyncio.create_task(cleanup_expired_streams())

    try:
        yield
    finally:
        cleanup_streams_task.cancel()
        try:
            await cleanup_streams_task
        except asyncio.CancelledError:
            pass

        await http_client_manager.close()
        await teardown_database()


app = FastAPI(
    title="Nebula",
    summary="Stremio stream add-on backed by a Bitmagnet instance.",
    lifespan=lifespan,
    redoc_url=None,
)


app.add_middleware(LoguruMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(base.router)
app.include_router(manifest.router)
app.include_router(streams_router.streams)
