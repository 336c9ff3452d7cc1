import os
from flask import current_app, request
from pathlib import Path
from dotenv import dotenv_values

def _get_staff_token() -> str:

    token = current_app.config.get("STAFF_API_TOKEN") or os.getenv("STAFF_API_TOKEN")
    if token and token.strip():
        return token.strip()

    root = Path(__file__).resolve().parents[1]
    env_path = root / ".env"
    if env_path.exists():
        token = dotenv_values(str(env_path)).get("STAFF_API_TOKEN")
        if token and token.strip():
            return token.strip()

    return "dev-staff-token"

def check_staff() -> bool:
    """
    Checks the Authorization header for a valid staff bearer token.
    """
    expected_token = _get_staff_token()

    auth_header = request.headers.get("Authorization", "").strip()
    if not auth_header.lower().startswith("bearer "):
        return False

    provided_token = auth_header[7:].strip()
    return provided_token == expected_token
