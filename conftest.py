# conftest.py

import os

import pytest

# Set testing environment BEFORE importing app so app.py selects TestingConfig
os.environ["FLASK_ENV"] = "testing"

# Now import app and other modules after environment is set
from app import app as flask_app  # noqa: E402
from childcare_app.models import Activity, Family, Student, db  # noqa: E402


@pytest.fixture(scope="function")
def app():
    """Create and configure a test Flask application"""
    flask_app.config.update(
        {
            "TESTING": True,
            "SECRET_KEY": "test-secret-key-for-testing-only",
            "ENABLE_FILE_LOGGING": False,
            "ENABLE_CONSOLE_LOGGING": False,
            "LOG_LEVEL": "DEBUG",
            "IMPORTER_ENABLED": False,
            "IMPORTER_ENTITIES": ("schools", "class_groups", "activities", "children"),
            "IMPORTER_RUN_BY": "test-importer",
            "IMPORTER_ARTIFACT_DIR": None,
            "IMPORTER_DEFAULT_SOURCES": {},
        }
    )
    # Mapping specs are cached per application; start each test from the YAML on disk.
    flask_app.extensions.pop("_importer_mapping_cache", None)

    from childcare_app.utils.logging_config import setup_logging

    setup_logging(flask_app)

    with flask_app.app_context():
        # Drop any existing tables to ensure clean state
        db.drop_all()
        db.create_all()
        yield flask_app
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_context(app):
    """Automatically provide app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture
def runner(app):
    """Create a test CLI runner for the Flask application"""
    return app.test_cli_runner()


@pytest.fixture
def family_factory(app):
    """Persist ``Family`` rows for reconciliation scenarios."""

    def _factory(name, **overrides):
        family = Family(family_name=name, is_active=True, auto_created=False, **overrides)
        db.session.add(family)
        db.session.commit()
        return family

    return _factory


@pytest.fixture
def student_factory(app):
    """Persist ``Student`` rows directly, bypassing the importer."""
    from datetime import datetime

    def _factory(reference, first_name="Existing", **overrides):
        values = {"date_of_birth": datetime(2015, 1, 1)}
        values.update(overrides)
        student = Student(reference=reference, first_name=first_name, **values)
        db.session.add(student)
        db.session.commit()
        return student

    return _factory


@pytest.fixture
def activity_factory(app):
    def _factory(legacy_id, **overrides):
        activity = Activity(legacy_id=legacy_id, is_active=True, **overrides)
        db.session.add(activity)
        db.session.commit()
        return activity

    return _factory


# Pytest configuration
def pytest_configure(config):
    """Ensure testing environment and register custom markers"""
    os.environ["FLASK_ENV"] = "testing"

    config.addinivalue_line("markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')")
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
    config.addinivalue_line("markers", "unit: marks tests as unit tests")


def pytest_collection_modifyitems(config, items):
    """Tag CLI and orchestrator tests as integration, everything else as unit"""
    for item in items:
        if "cli" in item.nodeid or "orchestrator" in item.nodeid:
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)
