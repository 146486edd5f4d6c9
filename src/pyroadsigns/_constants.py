"""Internal constants shared across the library."""

DEMO_IDENTITY = "user@example.com"
DEMO_SECRET = "password123"

DEFAULT_DATA_DIR = "~/.pyroadsigns"
DEFAULT_TIME_ZONE = "UTC"

# ------------------------------------------------------------------
# Map surface defaults (centered on Milan)
# ------------------------------------------------------------------

DEFAULT_CENTER: tuple[float, float] = (45.4642, 9.1900)
DEFAULT_ZOOM = 9
TILE_URL = "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png"
TILE_ATTRIBUTION = "© OpenStreetMap contributors"
TILE_MAX_ZOOM = 19

FIT_PADDING: tuple[int, int] = (20, 20)
SIZE_RECHECK_DELAY = 0.1
MARKER_ICON_SIZE = 32

# ------------------------------------------------------------------
# Position fix defaults
# ------------------------------------------------------------------

CAPTURE_TIMEOUT = 10.0
CAPTURE_MAXIMUM_AGE = 60.0

PBKDF2_ITERATIONS = 200_000
