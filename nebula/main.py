import traceback

import uvicorn

from nebula.api.app import app
from nebula.core.logger import log_startup_info, logger, setupLogger
from nebula.core.models import settings


def run_with_uvicorn():
    setupLogger(settings.LOG_LEVEL)

    config = uvicorn.Config(
        app,
        host=settings.FASTAPI_HOST,
        port=settings.FASTAPI_PORT,
        proxy_headers=True,
        forwarded_allow_ips="*",
        workers=settings.FASTAPI_WORKERS,
        log_config=None,
    )
    server = uvicorn.Server(config=config)

    log_startup_info(settings)
    try:
        server.run()
    except KeyboardInterrupt:
        logger.log("NEBULA", "Server stopped by user")
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        logger.exception(traceback.format_exc())
    finally:
        logger.log("NEBULA", "Server Shutdown")


if __name__ == "__main__":
    run_with_uvicorn()
