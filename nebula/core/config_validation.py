import base64
import binascii

import orjson
from pydantic import ValidationError

from nebula.core.logger import logger
from nebula.core.models import ConfigModel, default_config, settings


def decode_config(b64config: str):
    padded = b64config + "=" * (-len(b64config) % 4)
    config = orjson.loads(base64.urlsafe_b64decode(padded))
    return ConfigModel(**config).model_dump()


def encode_config(config: dict):
    return base64.urlsafe_b64encode(orjson.dumps(config)).decode().rstrip("=")


def config_check(b64config: str = None):
    if b64config:
        try:
            validated_config = decode_config(b64config)
        except (binascii.Error, ValueError, TypeError, ValidationError) as e:
            logger.warning(f"Invalid configuration received: {e}")
            return None
    else:
        validated_config = dict(default_config)

    if settings.BITMAGNET_URL:
        validated_config["bitmagnetUrl"] = settings.BITMAGNET_URL

    if not validated_config["bitmagnetUrl"]:
        logger.warning("Configuration has no Bitmagnet URL")
        return None

    return validated_config
