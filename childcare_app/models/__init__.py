# childcare_app/models/__init__.py
"""
Database models package
"""

from .activity import Activity
from .audit import AuditLog
from .base import BaseModel, db
from .class_group import ClassGroup
from .family import Family
from .importer import ImportRun, ImportRunStatus
from .school import School
from .student import Student

__all__ = [
    "db",
    "BaseModel",
    "Activity",
    "AuditLog",
    "ClassGroup",
    "Family",
    "School",
    "Student",
    # Importer bookkeeping
    "ImportRun",
    "ImportRunStatus",
]
