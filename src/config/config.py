import os

DEFAULT_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "8080"))

    # Outbound probe settings
    PROBE_TIMEOUT_SECONDS = float(os.environ.get("PROBE_TIMEOUT_SECONDS", "30"))
    BODY_PREVIEW_LIMIT = int(os.environ.get("BODY_PREVIEW_LIMIT", "1000"))
    PROBE_USER_AGENT = os.environ.get("PROBE_USER_AGENT", DEFAULT_USER_AGENT)

    # Public IP of this server, looked up once at startup
    SERVER_IP_LOOKUP_URL = os.environ.get(
        "SERVER_IP_LOOKUP_URL", "https://ipinfo.io/ip"
    )
    SERVER_IP_LOOKUP_TIMEOUT = float(os.environ.get("SERVER_IP_LOOKUP_TIMEOUT", "5"))

    # Directory holding the browser UI
    STATIC_DIR = os.environ.get("STATIC_DIR", "static")
