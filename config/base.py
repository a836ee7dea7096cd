# config.py
import os


def _coerce_bool(value, default=False):
    """Convert environment-style truthy/falsey values to bool."""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    value_str = str(value).strip().lower()
    if value_str in {"1", "true", "yes", "on"}:
        return True
    if value_str in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_entity_list(value):
    """
    Parse a comma-separated entity list while keeping order and removing duplicates.

    Returns:
        tuple[str, ...]: Normalized entity identifiers.
    """
    if not value:
        return ()

    seen = set()
    entities = []
    for raw_item in value.split(","):
        item = raw_item.strip().lower()
        if not item or item in seen:
            continue
        seen.add(item)
        entities.append(item)
    return tuple(entities)


_CONFIG_DIR = os.path.dirname(os.path.abspath(__file__))
_PROJECT_ROOT = os.path.dirname(_CONFIG_DIR)
_LEGACY_DIR = os.environ.get("IMPORTER_LEGACY_DIR", os.path.join(_PROJECT_ROOT, "docs", "legacy"))


class Config:
    _flask_env = os.environ.get("FLASK_ENV", "development")
    _is_production = _flask_env == "production"

    SECRET_KEY = os.environ.get("SECRET_KEY")
    if not SECRET_KEY and _is_production:
        raise ValueError("SECRET_KEY environment variable is required in production.")
    if not SECRET_KEY:
        SECRET_KEY = "dev-secret-key-change-in-production"

    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {}

    # Importer configuration
    IMPORTER_ENABLED = _coerce_bool(os.environ.get("IMPORTER_ENABLED"), default=True)
    IMPORTER_ENTITIES = _parse_entity_list(
        os.environ.get("IMPORTER_ENTITIES", "schools,class_groups,activities,children")
    )

    if IMPORTER_ENABLED and not IMPORTER_ENTITIES:
        raise ValueError("IMPORTER_ENABLED is true but IMPORTER_ENTITIES is empty. Provide at least one entity.")

    IMPORTER_RUN_BY = os.environ.get("IMPORTER_RUN_BY", "legacy-importer")
    IMPORTER_ARTIFACT_DIR = os.environ.get("IMPORTER_ARTIFACT_DIR")

    # Default legacy export locations, keyed by entity name.
    IMPORTER_DEFAULT_SOURCES = {
        "schools": (
            os.path.join(_LEGACY_DIR, "1_School", "School.xml"),
            os.path.join(_LEGACY_DIR, "1_School", "School.xsd"),
        ),
        "class_groups": (
            os.path.join(_LEGACY_DIR, "2_Class_Group", "Class Group.xml"),
            os.path.join(_LEGACY_DIR, "2_Class_Group", "Class Group.xsd"),
        ),
        "children": (
            os.path.join(_LEGACY_DIR, "4_Children", "Children.xml"),
            os.path.join(_LEGACY_DIR, "4_Children", "Children.xsd"),
        ),
        "activities": (
            os.path.join(_LEGACY_DIR, "3_Activity", "Activity.xml"),
            os.path.join(_LEGACY_DIR, "3_Activity", "Activity.xsd"),
        ),
    }
    IMPORTER_MAPPING_PATHS = {
        "schools": os.environ.get(
            "IMPORTER_SCHOOLS_MAPPING_PATH",
            os.path.join(_CONFIG_DIR, "mappings", "schools_v1.yaml"),
        ),
        "class_groups": os.environ.get(
            "IMPORTER_CLASS_GROUPS_MAPPING_PATH",
            os.path.join(_CONFIG_DIR, "mappings", "class_groups_v1.yaml"),
        ),
        "children": os.environ.get(
            "IMPORTER_CHILDREN_MAPPING_PATH",
            os.path.join(_CONFIG_DIR, "mappings", "children_v1.yaml"),
        ),
        "activities": os.environ.get(
            "IMPORTER_ACTIVITIES_MAPPING_PATH",
            os.path.join(_CONFIG_DIR, "mappings", "activities_v1.yaml"),
        ),
    }
    try:
        IMPORTER_HISTORY_DEFAULT_COUNT = max(1, int(os.environ.get("IMPORTER_HISTORY_DEFAULT_COUNT", "10")))
    except ValueError:
        IMPORTER_HISTORY_DEFAULT_COUNT = 10


class DevelopmentConfig(Config):
    DEBUG = True
    instance_path = os.path.join(_PROJECT_ROOT, "instance")

    if not os.path.exists(instance_path):
        os.makedirs(instance_path, exist_ok=True)

    # SQLite URI format: sqlite:///absolute/path (3 slashes for absolute path)
    db_path_normalized = os.path.join(instance_path, "childcare_dev.db").replace("\\", "/")
    db_uri = f"sqlite:///{db_path_normalized}"

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", db_uri)
    SQLALCHEMY_ECHO = _coerce_bool(os.environ.get("SQLALCHEMY_ECHO"), default=False)
    if SQLALCHEMY_DATABASE_URI.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS = {
            "connect_args": {
                "check_same_thread": False,
                "timeout": 5,
            }
        }
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {}


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = os.environ.get("SECRET_KEY", "test-secret-key-for-testing-only")
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": 5,
        }
    }


class ProductionConfig(Config):
    DEBUG = False
    uri = os.environ.get("DATABASE_URL")
    if uri and uri.startswith("postgres://"):
        uri = uri.replace("postgres://", "postgresql://", 1)
    SQLALCHEMY_DATABASE_URI = uri
    SQLALCHEMY_ECHO = False
