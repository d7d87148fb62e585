"""
Multi-Tenant Issue Tracker

Organization-scoped issue tracking with role-based permissions
and an append-only audit trail of field changes.
"""

__version__ = "1.0.0"
