"""Library configuration."""

import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Library settings, overridable via ``RASTERSTAG_*`` environment variables."""

    # Buffer limits
    MAX_PIXELS: int = 8192 * 8192  # Largest accepted width * height

    # Filter defaults
    DEFAULT_SOBEL_SIZE: int = 1  # 1 = 3x3, 2 = 5x5, 3 = 7x7

    # Logging
    LOG_LEVEL: str = "WARNING"

    model_config = {"env_prefix": "RASTERSTAG_"}


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Set the level of the ``rasterstag`` logger hierarchy.

    :param level: Level name, e.g. ``"DEBUG"``. Defaults to ``settings.LOG_LEVEL``.
    """
    logging.getLogger("rasterstag").setLevel((level or settings.LOG_LEVEL).upper())
