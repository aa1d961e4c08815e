"""Application constants - centralized configuration values."""

# =============================================================================
# Pagination
# =============================================================================
MOVIES_DEFAULT_LIMIT = 100
MANGA_DEFAULT_PER_PAGE = 40

# =============================================================================
# Sort Options
# =============================================================================
# API sort names -> movies column
MOVIE_SORT_FIELDS = {
    "SortName": "title",
    "Name": "title",
    "DateCreated": "last_scanned_date",
    "PremiereDate": "premiered",
    "CommunityRating": "rating",
    "RunTimeTicks": "runtime",
    "movieCount": "id",
}
DEFAULT_MOVIE_SORT_FIELD = "premiered"
DEFAULT_MOVIE_SORT_BY = "PremiereDate"
DEFAULT_MOVIE_SORT_ORDER = "Descending"

DEFAULT_MANGA_SORT = "title_asc"

# Largest id SQLite can store in an INTEGER column
MAX_SQLITE_INTEGER = 2**63 - 1

# =============================================================================
# Related movies
# =============================================================================
MAX_PRIMARY_RELATED = 8
NUM_RANDOM_GENRE_PICKS = 2
MAX_GENRE_CANDIDATES = 10
RELATION_GENRE_RANDOM_PICK = "genre_random_pick"

# =============================================================================
# Units
# =============================================================================
# Runtime minutes -> 100ns ticks
RUNTIME_TICKS_PER_MINUTE = 60 * 1000 * 10000
SERIES_MAX_BACKDROPS = 3

# =============================================================================
# Cache-Control values
# =============================================================================
CACHE_CONTROL_DEFAULT = "public, max-age=86400"  # 1 day
CACHE_CONTROL_STATIC = "public, max-age=31536000"  # 1 year
CACHE_CONTROL_MANGA_IMAGES = "public, max-age=604800"  # 7 days
CACHE_CONTROL_STREAM = "public, max-age=3600"  # 1 hour
STREAM_CHUNK_SIZE = 64 * 1024

# =============================================================================
# Session & Security
# =============================================================================
SESSION_COOKIE_NAME = "auth_session"
LOGIN_PATH = "/login"
PUBLIC_PATH_PREFIXES = ("/login", "/static/", "/favicon.ico", "/health")
API_PATH_PREFIXES = ("/api/", "/api_movies/")
LOGIN_ERROR_MESSAGE = "Invalid login code, please try again."

# =============================================================================
# Route prefixes
# =============================================================================
MOVIE_API_PREFIX = "/api_movies"
MANGA_API_PREFIX = "/api"
MANGA_IMAGES_PATH = "/data/manga_images"

# =============================================================================
# HTML shells (static bucket keys)
# =============================================================================
LOGIN_PAGE = "login.html"
MAIN_PAGE = "main.html"
MANGA_PAGE = "manga.html"
VIDEO_DETAIL_PAGE = "video_detail.html"

# =============================================================================
# Response headers
# =============================================================================
# Names the branch that produced a response; echoed in the access log
SERVED_BY_HEADER = "X-Served-By"
