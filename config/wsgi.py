"""WSGI config for Marina CRM project.

This module exposes the WSGI application for use by Django's runserver and
production WSGI servers. The database readiness gate is initialized before
the first request is served.
"""

import os
from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_wsgi_application()

from apps.core.readiness import database_gate  # noqa: E402

database_gate.initialize()
