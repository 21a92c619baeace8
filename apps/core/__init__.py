"""Core app package.

Cross-cutting infrastructure shared by the domain apps: the database
readiness gate and its middleware, the health endpoint, pagination and
role based permission classes.
"""
