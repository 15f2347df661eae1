from .base import *

# SECURITY WARNING: don't run with debug turned on in production!
DEBUG = True

# Email backend for development
EMAIL_BACKEND = 'django.core.mail.backends.console.EmailBackend'

# Allow all hosts in development
ALLOWED_HOSTS = ['*']

# CORS settings for development
CORS_ALLOW_ALL_ORIGINS = True

# Disable some security features for development
SECURE_SSL_REDIRECT = False
SECURE_CONTENT_TYPE_NOSNIFF = False

LOGGING['loggers']['roommate_matching']['level'] = 'DEBUG'
