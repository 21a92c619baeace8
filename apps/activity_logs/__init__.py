"""Activity log app package.

Audit trail of user and system actions: who created, changed or deleted
which entity, with before/after values and request metadata.
"""
