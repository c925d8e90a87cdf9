"""
Configuration module for the ISK Import Report
Environment-agnostic: works locally, in Docker and on Google Cloud
Loads environment variables and validates configuration
"""
import os
import tempfile
from pathlib import Path

from dotenv import load_dotenv

from isk_import.errors import ConfigurationError

# Get project root directory (parent of src/)
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent

# Load environment variables from .env file (if exists - local dev only)
env_file = PROJECT_ROOT / '.env'
if env_file.exists():
    load_dotenv(env_file)

# ═══════════════════════════════════════════════════════════════════
# ENVIRONMENT DETECTION
# ═══════════════════════════════════════════════════════════════════

def detect_environment() -> str:
    """
    Detect which environment we're running in

    Returns:
        'cloud_run', 'kubernetes', 'docker', or 'local'
    """
    # Cloud Run / Cloud Functions set K_SERVICE
    if os.getenv('K_SERVICE'):
        return 'cloud_run'

    if os.getenv('KUBERNETES_SERVICE_HOST'):
        return 'kubernetes'

    if Path('/.dockerenv').exists():
        return 'docker'

    if os.getenv('GOOGLE_CLOUD_PROJECT') or os.getenv('GCP_PROJECT'):
        return 'cloud_run'

    return 'local'

RUNTIME_ENVIRONMENT = detect_environment()

# ═══════════════════════════════════════════════════════════════════
# CREDENTIAL RESOLUTION
# ═══════════════════════════════════════════════════════════════════

# Drive covers folder/file management, Sheets covers the report workbook
GOOGLE_SCOPES = [
    'https://www.googleapis.com/auth/drive',
    'https://www.googleapis.com/auth/spreadsheets',
]

_credentials_path = None  # Lazy loaded
_credentials_resolved = False


def resolve_credentials():
    """
    Resolve Google service-account credentials from multiple sources.
    Priority order:
    1. Local file (GOOGLE_CREDENTIALS_FILE env var or config/service.json)
    2. JSON string in environment variable (GOOGLE_CREDENTIALS_JSON)
    3. Application Default Credentials (Cloud Run / Kubernetes)

    Returns:
        Path to credentials JSON file (may be temp file for JSON string sources)
        None if using Application Default Credentials
    """
    creds_file = os.getenv('GOOGLE_CREDENTIALS_FILE')
    if creds_file:
        if not os.path.isabs(creds_file):
            creds_file = str(PROJECT_ROOT / creds_file)
        if os.path.exists(creds_file):
            return creds_file

    default_path = PROJECT_ROOT / 'config' / 'service.json'
    if default_path.exists():
        return str(default_path)

    creds_json = os.getenv('GOOGLE_CREDENTIALS_JSON')
    if creds_json:
        temp_path = Path(tempfile.gettempdir()) / 'isk_import_credentials.json'
        temp_path.write_text(creds_json)
        return str(temp_path)

    if RUNTIME_ENVIRONMENT in ('cloud_run', 'kubernetes'):
        return None  # Signal to use ADC

    raise ConfigurationError(
        "No valid credentials source found. Set one of:\n"
        "  - GOOGLE_CREDENTIALS_FILE (path to JSON file)\n"
        "  - GOOGLE_CREDENTIALS_JSON (JSON string)\n"
        "  - Place service.json in config/ folder"
    )


def get_credentials_path():
    """Get credentials path (lazy loaded)"""
    global _credentials_path, _credentials_resolved
    if not _credentials_resolved:
        _credentials_path = resolve_credentials()
        _credentials_resolved = True
    return _credentials_path


def get_credentials():
    """Build google-auth credentials shared by the Drive and Sheets clients."""
    creds_path = get_credentials_path()
    if creds_path:
        from google.oauth2.service_account import Credentials
        return Credentials.from_service_account_file(creds_path, scopes=GOOGLE_SCOPES)

    import google.auth
    credentials, _ = google.auth.default(scopes=GOOGLE_SCOPES)
    return credentials

# ═══════════════════════════════════════════════════════════════════
# WRITABLE PATHS
# ═══════════════════════════════════════════════════════════════════

def get_writable_path(folder_name: str) -> str:
    """Get a writable path that works in all environments"""
    env_path = os.getenv(folder_name.upper() + '_DIR')
    if env_path:
        path = Path(env_path) if os.path.isabs(env_path) else PROJECT_ROOT / env_path
    else:
        path = PROJECT_ROOT / folder_name

    # Cloud Functions only allow writes under /tmp
    if not path.exists():
        try:
            path.mkdir(parents=True, exist_ok=True)
        except (PermissionError, OSError):
            path = Path(tempfile.gettempdir()) / 'isk_import' / folder_name
            path.mkdir(parents=True, exist_ok=True)

    return str(path)

# ═══════════════════════════════════════════════════════════════════
# CONFIGURATION VALUES
# ═══════════════════════════════════════════════════════════════════

# Root Drive folder holding the four working folders
DRIVE_FOLDER_ID = os.getenv('DRIVE_FOLDER_ID', '')

# Working folder names under the root
UPLOAD_FOLDER_NAME = 'UploadHere'
PROCESSED_FOLDER_NAME = 'Processed'
FAILED_FOLDER_NAME = 'Failed'
REPORT_FOLDER_NAME = 'Report'

# Report spreadsheet
REPORT_SHEET_NAME = 'ISK Import Report'
REPORT_COLUMNS = ['ID', 'Import Date', 'Echoes Date', 'Name', 'Amount', 'Link']
REPORT_HEADER_RANGE = 'A1:F1'
IMPORT_DATE_FORMAT = '%m-%d-%Y %H:%M:%S'

# Drive MIME types
FOLDER_MIME_TYPE = 'application/vnd.google-apps.folder'
DOCUMENT_MIME_TYPE = 'application/vnd.google-apps.document'
SPREADSHEET_MIME_TYPE = 'application/vnd.google-apps.spreadsheet'
EXPORT_MIME_TYPE = 'text/plain'

# Suffix for the OCR document created from each screenshot
DERIVED_DOCUMENT_SUFFIX = '_results'

# Worker pool size for the per-file fan-out
MAX_WORKERS = int(os.getenv('MAX_WORKERS', '4'))

# Logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_DIR = get_writable_path('logs')

# HTTP trigger
API_HOST = os.getenv('API_HOST', '0.0.0.0')
API_PORT = int(os.getenv('API_PORT', '8080'))

# Cloud Run sets PORT to the single port it routes traffic to
_cloud_run_port = os.getenv('PORT')
if _cloud_run_port:
    API_PORT = int(_cloud_run_port)


def validate_config():
    """Validate that all required configuration is present"""
    errors = []

    if not DRIVE_FOLDER_ID:
        errors.append("DRIVE_FOLDER_ID is not set")

    if MAX_WORKERS < 1:
        errors.append(f"MAX_WORKERS must be at least 1 (got {MAX_WORKERS})")

    try:
        creds_path = get_credentials_path()
        if creds_path and not os.path.exists(creds_path):
            errors.append(f"Google credentials file not found: {creds_path}")
    except ConfigurationError as e:
        errors.append(str(e))

    if errors:
        raise ConfigurationError("Configuration errors:\n" + "\n".join(errors))

    return True


if __name__ == "__main__":
    try:
        validate_config()
        print(f"[OK] Configuration validated ({RUNTIME_ENVIRONMENT})")
    except ConfigurationError as e:
        print(f"[FAIL] Configuration validation failed:\n{e}")
