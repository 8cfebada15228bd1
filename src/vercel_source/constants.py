"""
Constants and configuration values for vercel-source-downloader.

This module contains the API endpoints, identifier patterns, environment
variable names, logging settings and exit codes used throughout the
application.
"""

# Vercel API
VERCEL_API_BASE = "https://api.vercel.com"
DEPLOYMENT_BY_DOMAIN_PATH = "/v13/deployments/{domain}"
DEPLOYMENT_FILES_PATH = "/v6/deployments/{deployment_id}/files"
DEPLOYMENT_FILE_CONTENT_PATH = "/v7/deployments/{deployment_id}/files/{file_id}"
TEAM_ID_QUERY_PARAM = "teamId"

# Deployment identifiers
CANONICAL_ID_PREFIX = "dpl_"
RAW_ID_PATTERN = r"[a-zA-Z0-9]{24,}"

# Remote tree layout
SOURCE_ROOT_NAME = "src"
NODE_TYPE_FILE = "file"
NODE_TYPE_DIRECTORY = "directory"

# Download configuration defaults
DEFAULT_MAX_CONCURRENT = 8

# Error categories recorded on failed download results
ERROR_TYPE_NETWORK = "network"
ERROR_TYPE_HTTP = "http"
ERROR_TYPE_FILESYSTEM = "filesystem"
ERROR_TYPE_VALIDATION = "validation"
ERROR_TYPE_PAYLOAD = "payload"
ERROR_TYPE_UNKNOWN = "unknown"

# Environment variable names
TOKEN_ENV_VAR = "VERCEL_TOKEN"
TEAM_ENV_VAR = "VERCEL_TEAM"
LOG_LEVEL_ENV_VAR = "VERCEL_SOURCE_LOG_LEVEL"
MAX_CONCURRENT_ENV_VAR = "VERCEL_SOURCE_MAX_CONCURRENT"

# Logging configuration
APP_NAME = "vercel-source-downloader"
LOGGER_NAME = "vercel_source"
LOG_FILE_NAME = "vercel-source.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Process exit codes
EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_CONFIG = 3
EXIT_NOT_FOUND = 4
EXIT_SOURCE_NOT_FOUND = 5
EXIT_TRANSPORT = 6
EXIT_PARTIAL_FAILURE = 7
EXIT_FILESYSTEM = 8
EXIT_INTERRUPTED = 130

# User-facing hints
HINT_DOMAIN_NOT_FOUND = (
    "Please provide a valid deployment URL (e.g., example.vercel.app) "
    "or deployment ID (e.g., dpl_xxxx)"
)
HINT_DEPLOYMENT_NOT_FOUND = (
    "Try using the deployment URL (e.g., your-app.vercel.app) "
    "instead of the dashboard ID."
)
MSG_RAW_ID_WARNING = (
    "Note: Using dashboard deployment ID. If this fails, "
    "try using the deployment URL instead."
)
