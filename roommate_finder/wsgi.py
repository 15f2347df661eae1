import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'roommate_finder.settings.development')

application = get_wsgi_application()
