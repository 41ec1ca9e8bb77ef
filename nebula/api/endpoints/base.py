from fastapi import APIRouter
from fastapi.responses import JSONResponse, RedirectResponse

from nebula.core.config_validation import config_check
from nebula.core.exceptions import SearchBackendError
from nebula.core.logger import logger
from nebula.scrapers.bitmagnet import BitMagnet
from nebula.services.trackers import tracker_list
from nebula.utils.http_client import http_client_manager

router = APIRouter()


@router.get("/", include_in_schema=False)
async def root():
    return RedirectResponse("/manifest.json")


@router.get("/health", tags=["General"], summary="Health Check")
async def health():
    return {"status": "ok", "trackers_loaded": tracker_list.is_loaded}


@router.get("/counts.json", tags=["Bitmagnet"], summary="Content Counts")
@router.get("/{b64config}/counts.json", tags=["Bitmagnet"], summary="Content Counts")
async def content_counts(b64config: str = None):
    config = config_check(b64config)
    if not config:
        return JSONResponse(
            {"error": "Invalid or incomplete configuration."}, status_code=400
        )

    session = await http_client_manager.get_session()
    bitmagnet = BitMagnet(session, config["bitmagnetUrl"], timeout=config["bitmagnetTimeout"])
    try:
        counts = await bitmagnet.get_content_counts()
    except SearchBackendError as e:
        logger.warning(f"Failed to fetch content counts from Bitmagnet: {e}")
        return JSONResponse({"error": e.display_message}, status_code=502)

    return {value: count.model_dump() for value, count in counts.items()}
