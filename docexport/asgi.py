"""
ASGI config for docexport project.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'docexport.settings')

application = get_asgi_application()
