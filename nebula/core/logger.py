import sys

from loguru import logger

from nebula.core.log_levels import CUSTOM_LOG_LEVELS, STANDARD_LOG_LEVELS


def setupLogger(level: str):
    # Configure custom log levels
    for level_name, level_config in CUSTOM_LOG_LEVELS.items():
        logger.level(
            level_name,
            no=level_config["no"],
            icon=level_config["icon"],
            color=level_config["loguru_color"],
        )

    # Configure standard log levels (override defaults)
    for level_name, level_config in STANDARD_LOG_LEVELS.items():
        logger.level(
            level_name, icon=level_config["icon"], color=level_config["loguru_color"]
        )

    log_format = (
        "<white>{time:YYYY-MM-DD}</white> <magenta>{time:HH:mm:ss}</magenta> | "
        "<level>{level.icon}</level> <level>{level}</level> | "
        "<cyan>{module}</cyan>.<cyan>{function}</cyan> - <level>{message}</level>"
    )

    logger.configure(
        handlers=[
            {
                "sink": sys.stderr,
                "level": level,
                "format": log_format,
                "backtrace": False,
                "diagnose": False,
                "enqueue": True,
            }
        ]
    )


setupLogger("DEBUG")


def mask_secret(value: str):
    if not value:
        return "None"

    if len(value) <= 6:
        return "*" * len(value)

    return f"{value[:3]}{'*' * (len(value) - 6)}{value[-3:]}"


def log_startup_info(settings):
    logger.log(
        "NEBULA",
        f"Server started on http://{settings.FASTAPI_HOST}:{settings.FASTAPI_PORT} - {settings.FASTAPI_WORKERS} workers",
    )
    logger.log(
        "NEBULA",
        f"Database ({settings.DATABASE_TYPE}): {settings.DATABASE_PATH if settings.DATABASE_TYPE == 'sqlite' else settings.DATABASE_URL} - TTL: streams={settings.STREAM_CACHE_TTL}s, empty={settings.STREAM_CACHE_EMPTY_TTL}s",
    )
    logger.log(
        "NEBULA",
        f"Bitmagnet: {settings.BITMAGNET_URL or 'from user configuration'} - Timeout: {settings.BITMAGNET_TIMEOUT}s - Limit: {settings.BITMAGNET_SEARCH_LIMIT} - Sort: {settings.BITMAGNET_SORT_FIELD} ({'desc' if settings.BITMAGNET_SORT_DESCENDING else 'asc'})",
    )
    logger.log("NEBULA", f"TMDB API Key: {mask_secret(settings.TMDB_API_KEY)}")
    logger.log(
        "NEBULA",
        f"Premiumize API Key: {mask_secret(settings.PREMIUMIZE_API_KEY)} - Timeout: {settings.DEBRID_TIMEOUT}s",
    )
    logger.log(
        "NEBULA",
        f"Trackers: {settings.TRACKERS_URL} - Timeout: {settings.TRACKERS_TIMEOUT}s",
    )
