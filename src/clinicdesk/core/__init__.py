"""Core services and cross-cutting concerns.

Nothing is re-exported here: ``clinicdesk.config`` imports
``clinicdesk.core.constants`` and must not pull in modules that read the
settings. Import from the submodules:

- clinicdesk.core.errors: AppException, NotFoundError, etc.
- clinicdesk.core.permissions: catalog, evaluator and guards
- clinicdesk.core.auth: sessions, tokens and request dependencies
- clinicdesk.core.logging: structlog setup and request logging
"""
