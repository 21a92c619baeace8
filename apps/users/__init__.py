"""Users app package.

Custom user model with email login and platform roles, JWT
authentication endpoints and the user management API.
"""
