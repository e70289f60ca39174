"""Internal constants shared across the library."""

BASE_URL = "http://localhost:8080"
VIEW_PATH = "/api/v0/"
USER_AGENT = "liveplaya-python/0"

#: Seconds between periodic view refreshes.
DEFAULT_REFRESH_INTERVAL: float = 5.0

#: Total per-request timeout in seconds.
DEFAULT_REQUEST_TIMEOUT: float = 30.0

#: Envelope status the server sends alongside a successful view.
ENVELOPE_STATUS_OK = "ok"

#: Decimal places used when serializing bounding-box coordinates.
BOUNDS_PRECISION = 5
