"""Vertex AI settings and service-account credentials shared by Vertex-hosted providers."""

import base64
import json
import os

from google.oauth2 import service_account

_VERTEX_SCOPES = [
    "https://www.googleapis.com/auth/cloud-platform",
    "https://www.googleapis.com/auth/cloud-platform.read-only",
]


def create_vertex_credentials() -> service_account.Credentials:
    """Create Google credentials from the base64-encoded VERTEX_CREDENTIALS variable."""
    vertex_credentials = os.environ.get("VERTEX_CREDENTIALS")
    if not vertex_credentials:
        raise ValueError("VERTEX_CREDENTIALS environment variable is not set")

    credentials_info = json.loads(base64.b64decode(vertex_credentials.encode()).decode())
    credentials = service_account.Credentials.from_service_account_info(credentials_info)
    return credentials.with_scopes(_VERTEX_SCOPES)


def vertex_project_and_location() -> tuple[str, str]:
    """Read VERTEX_PROJECT_NAME and VERTEX_LOCATION.

    Raises:
        ValueError: If either variable is missing
    """
    project = os.environ.get("VERTEX_PROJECT_NAME")
    location = os.environ.get("VERTEX_LOCATION")

    if not project:
        raise ValueError("VERTEX_PROJECT_NAME environment variable is not set")
    if not location:
        raise ValueError("VERTEX_LOCATION environment variable is not set")

    return project, location
