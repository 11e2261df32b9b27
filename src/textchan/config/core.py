import logging
import os

logger = logging.getLogger(__name__)

_DEFAULT_API_BASE = "https://discord.com/api/v10"


class Core:
    def __init__(self, config: dict | None = None) -> None:
        cfg = (config or {}).get("textchan", {})
        http_cfg = cfg.get("http", {})
        cache_cfg = cfg.get("cache", {})

        token_env = str(http_cfg.get("token_env", "TEXTCHAN_TOKEN"))

        self.TOKEN: str | None = os.getenv(token_env)
        self.API_BASE: str = str(http_cfg.get("api_base", os.getenv("TEXTCHAN_API_BASE", _DEFAULT_API_BASE))).rstrip("/")
        self.USER_AGENT: str = str(http_cfg.get("user_agent", os.getenv("TEXTCHAN_USER_AGENT", "textchan (https://github.com/textchan/textchan, 0.1.0)")))
        self.MAX_IMAGE_MB: int = int(http_cfg.get("max_image_mb", os.getenv("TEXTCHAN_MAX_IMAGE_MB", "8")))

        # Negative means unbounded, zero disables retention.
        self.MESSAGE_CACHE_MAX_SIZE: int = int(
            cache_cfg.get("message_cache_max_size", os.getenv("TEXTCHAN_MESSAGE_CACHE_MAX_SIZE", "200"))
        )

        if not self.TOKEN:
            logger.debug("No token found in %s; REST calls need an explicit token.", token_env)
