"""Google API credentials

Credentials are resolved once and shared by every adapter.

On Cloud Run / Cloud Functions, Application Default Credentials (ADC) are
used. Locally a service account key file is used.
"""

import os
from functools import lru_cache

import google.auth
from google.auth.credentials import Credentials
from google.oauth2 import service_account

# Sheets read/write and signature uploads
SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/devstorage.read_write",
]


def _is_cloud_environment() -> bool:
    """Cloud Run (service / job) or Cloud Functions"""
    return any(
        os.getenv(name) is not None
        for name in ("K_SERVICE", "FUNCTION_TARGET", "CLOUD_RUN_JOB")
    )


@lru_cache(maxsize=1)
def get_google_credentials(service_account_path: str | None = None) -> Credentials:
    """
    Resolve Google API credentials (cached).

    Priority:
    1. Cloud environment: Application Default Credentials
    2. Local: service account key file
       (argument, then GOOGLE_APPLICATION_CREDENTIALS, then service_account.json)

    Args:
        service_account_path: path of the service account key file

    Returns:
        Credentials: Google API credentials

    Raises:
        FileNotFoundError: no key file was found locally
    """
    if _is_cloud_environment():
        creds, _project = google.auth.default(scopes=SCOPES)
        return creds

    path = (
        service_account_path
        or os.getenv("GOOGLE_APPLICATION_CREDENTIALS")
        or "service_account.json"
    )
    if not os.path.exists(path):
        raise FileNotFoundError(f"Service account key file not found: {path}")

    return service_account.Credentials.from_service_account_file(path, scopes=SCOPES)
