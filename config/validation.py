# config/validation.py

"""
Environment variable validation for the legacy import application.
Validates required environment variables at startup.
"""

import os
import sys
from typing import List, Tuple

_KNOWN_ENTITIES = {"schools", "class_groups", "activities", "children"}
_LOG_FORMATS = {"json", "text"}


def validate_environment(flask_env: str = None) -> Tuple[bool, List[str]]:
    """
    Validate required environment variables.

    Args:
        flask_env: Flask environment (development, production, testing)
                  If None, reads from FLASK_ENV environment variable

    Returns:
        Tuple of (is_valid, list_of_errors)
    """
    if flask_env is None:
        flask_env = os.environ.get("FLASK_ENV", "development")

    errors = []

    entities = [item.strip().lower() for item in os.environ.get("IMPORTER_ENTITIES", "").split(",") if item.strip()]
    unknown = sorted(set(entities) - _KNOWN_ENTITIES)
    if unknown:
        errors.append(
            f"IMPORTER_ENTITIES contains unknown entities: {', '.join(unknown)}. "
            f"Expected any of: {', '.join(sorted(_KNOWN_ENTITIES))}"
        )

    log_format = os.environ.get("LOG_FORMAT")
    if log_format and log_format.lower() not in _LOG_FORMATS:
        errors.append("LOG_FORMAT must be 'json' or 'text'")

    legacy_dir = os.environ.get("IMPORTER_LEGACY_DIR")
    if legacy_dir and not os.path.isdir(legacy_dir):
        errors.append(f"IMPORTER_LEGACY_DIR does not exist: {legacy_dir}")

    # Only validate secrets and database in production
    if flask_env == "production":
        secret_key = os.environ.get("SECRET_KEY", "")
        if not secret_key or secret_key == "dev-secret-key-change-in-production":
            errors.append(
                "SECRET_KEY is required in production and must not be the default value. "
                'Generate a secure key: python -c "import secrets; print(secrets.token_hex(32))"'
            )

        if not os.environ.get("DATABASE_URL"):
            errors.append(
                "DATABASE_URL is required in production. "
                "Set it to the connection string of the line-of-business database."
            )

    is_valid = len(errors) == 0
    return is_valid, errors


def validate_and_exit(flask_env: str = None) -> None:
    """
    Validate environment variables and exit with error if validation fails.
    Intended to be called at application startup.

    Args:
        flask_env: Flask environment (development, production, testing)
    """
    is_valid, errors = validate_environment(flask_env)

    if not is_valid:
        print("=" * 80, file=sys.stderr)
        print("ENVIRONMENT VALIDATION FAILED", file=sys.stderr)
        print("=" * 80, file=sys.stderr)
        print("\nThe following environment variables are missing or invalid:\n", file=sys.stderr)

        for i, error in enumerate(errors, 1):
            print(f"{i}. {error}", file=sys.stderr)

        print("\n" + "=" * 80, file=sys.stderr)
        print("Please check your .env file or environment variables.", file=sys.stderr)
        print("=" * 80, file=sys.stderr)

        sys.exit(1)
