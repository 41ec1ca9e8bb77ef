from urllib.parse import unquote

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from nebula.core.config_validation import config_check
from nebula.core.exceptions import (MalformedIdentifier, SearchBackendError,
                                    UnsupportedKind)
from nebula.core.logger import logger
from nebula.core.models import settings
from nebula.core.result import attempt
from nebula.services.models import DirectStream
from nebula.services.orchestration import build_resolver
from nebula.services.stream_cache import cache_key, stream_cache
from nebula.utils.http_client import http_client_manager
from nebula.utils.parsing import parse_media_id

streams = APIRouter()


@streams.get("/stream/{media_type}/{media_id}.json", tags=["Stremio"])
@streams.get("/{b64config}/stream/{media_type}/{media_id}.json", tags=["Stremio"])
async def stream(media_type: str, media_id: str, b64config: str = None):
    media_id = unquote(media_id)

    config = config_check(b64config)
    if not config:
        return JSONResponse(
            {"error": "Invalid or incomplete configuration."}, status_code=400
        )

    try:
        identifier = parse_media_id(media_type, media_id)
    except (UnsupportedKind, MalformedIdentifier) as e:
        logger.log("API", f"❌ Rejected stream request {media_type} {media_id}: {e}")
        return JSONResponse({"error": e.display_message}, status_code=400)

    key = cache_key(identifier.media_id, identifier.season, identifier.episode)
    cached = await attempt(stream_cache.get(key), "Stream cache lookup")
    if cached.ok and cached.value is not None:
        logger.log(
            "STREAM",
            f"🚀 Cache hit for {identifier.log_name()}, returning {len(cached.value)} streams",
        )
        return {"streams": cached.value}

    logger.log("STREAM", f"🔍 Cache miss for {identifier.log_name()}, searching...")

    session = await http_client_manager.get_session()
    try:
        resolver = build_resolver(session, config)
        results = await resolver.resolve(identifier)
    except SearchBackendError as e:
        logger.warning(f"Search failed for {identifier.log_name()}: {e}")
        return {"streams": []}

    payload = [result.to_stremio() for result in results]
    if any(isinstance(result, DirectStream) for result in results):
        # direct links belong to the requesting user's debrid account
        logger.log(
            "STREAM",
            f"Not caching {identifier.log_name()}, results contain direct links",
        )
        return {"streams": payload}

    ttl = settings.STREAM_CACHE_TTL if payload else settings.STREAM_CACHE_EMPTY_TTL
    await attempt(stream_cache.set(key, payload, ttl), "Stream cache write")

    return {"streams": payload}
