import os


class Indicators:
    def __init__(self, config: dict | None = None) -> None:
        typing_cfg = (config or {}).get("textchan", {}).get("typing", {})
        # Seconds an indicator stays visible without renewal.
        self.TYPING_EXPIRY: float = float(typing_cfg.get("expiry", os.getenv("TEXTCHAN_TYPING_EXPIRY", "10")))
        # Must stay below TYPING_EXPIRY.
        self.TYPING_REFRESH_INTERVAL: float = float(
            typing_cfg.get("refresh_interval", os.getenv("TEXTCHAN_TYPING_REFRESH_INTERVAL", "9"))
        )
        if self.TYPING_REFRESH_INTERVAL >= self.TYPING_EXPIRY:
            raise ValueError("typing refresh_interval must be shorter than expiry")
