from fastapi import APIRouter, Request

from nebula.core.config_validation import config_check
from nebula.core.models import settings

router = APIRouter()


@router.get(
    "/manifest.json",
    tags=["Stremio"],
    summary="Add-on Manifest",
    description="Returns the add-on manifest.",
)
@router.get(
    "/{b64config}/manifest.json",
    tags=["Stremio"],
    summary="Add-on Manifest",
    description="Returns the add-on manifest with existing configuration.",
)
async def manifest(request: Request, b64config: str = None):
    base_manifest = {
        "id": settings.ADDON_ID,
        "version": "1.0.0",
        "name": settings.ADDON_NAME,
        "description": "Provides movie and series streams from a Bitmagnet instance.",
        "catalogs": [],
        "resources": ["stream"],
        "types": ["movie", "series"],
        "idPrefixes": ["tt"],
        "behaviorHints": {"configurable": True, "configurationRequired": False},
    }

    config = config_check(b64config)
    if not config:
        base_manifest["name"] = f"❌ | {settings.ADDON_NAME}"
        base_manifest["description"] = (
            f"⚠️ INVALID CONFIGURATION, PLEASE RE-CONFIGURE ON {request.url.scheme}://{request.url.netloc} ⚠️"
        )
        return base_manifest

    if config["premiumizeApiKey"]:
        base_manifest["name"] = f"{settings.ADDON_NAME} | PM"

    return base_manifest
