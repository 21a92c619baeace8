"""ASGI config for Marina CRM project.

Refer to the official Django documentation for more information on using
ASGI with Django. The database readiness gate is initialized before the
application starts accepting requests.
"""

import os
from django.core.asgi import get_asgi_application  # type: ignore

# Use the development settings by default. Production servers should set
# DJANGO_SETTINGS_MODULE accordingly.
os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'config.settings.dev')

application = get_asgi_application()

from apps.core.readiness import database_gate  # noqa: E402

database_gate.initialize()
