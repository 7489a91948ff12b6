"""
Auth Service Domain Entities

All domain entities organized by model.
Each entity in its own file for better maintainability.
"""

# Export all enums
from .enums import AccountStatus, AuditAction

# Export all entities
from .account import Account, DEFAULT_ROLES, SENSITIVE_FIELDS
from .session import Session
from .audit_event import AuditEvent

__all__ = [
    # Enums
    "AccountStatus",
    "AuditAction",
    # Entities
    "Account",
    "Session",
    "AuditEvent",
    # Constants
    "DEFAULT_ROLES",
    "SENSITIVE_FIELDS",
]
