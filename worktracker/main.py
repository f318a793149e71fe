"""Process bootstrap: logging, tables and the vault codec."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

from worktracker.config import Settings
from worktracker.config import settings as default_settings
from worktracker.database import init_db
from worktracker.utils.crypto import VaultCodec, build_codec

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    level = (level or default_settings.log_level).upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    # basicConfig is a no-op once handlers exist
    logging.getLogger().setLevel(level)
    # Engine echo is noisy; keep SQL out of INFO
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


async def bootstrap(
    settings: Settings | None = None, bind: AsyncEngine | None = None
) -> VaultCodec:
    """Prepare the process and return the codec it should use until exit.

    The codec is built exactly once here and handed to the service layer;
    nothing else reads the encryption key.
    """
    settings = settings or default_settings
    configure_logging(settings.log_level)

    await init_db(bind)
    codec = build_codec(settings)
    logger.info(
        "Vault ready (env=%s, key=%s)",
        settings.env,
        "configured" if settings.has_encryption_key else "ephemeral",
    )
    return codec
