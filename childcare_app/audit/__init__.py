"""Field-level change log shared across the application."""

from .service import AuditEntityType, AuditService, AuditValidationError

__all__ = ["AuditEntityType", "AuditService", "AuditValidationError"]
