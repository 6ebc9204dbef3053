import os

from django.core.exceptions import ImproperlyConfigured

from .secrets import get_secret
from .settings_template import *  # NOQA ignore=F405
from .settings_template import DATABASES, LOGGING, STORAGES

LOGGING["handlers"]["stream"]["level"] = "INFO"
LOGGING["handlers"]["file"]["level"] = "INFO"
LOGGING["handlers"]["file"]["filename"] = "./logs/driveport-web.log"
LOGGING["handlers"]["celery"]["level"] = "INFO"
LOGGING["handlers"]["celery"]["filename"] = "./logs/driveport-celery.log"
LOGGING["loggers"]["django"]["level"] = "INFO"
LOGGING["loggers"]["celery"]["level"] = "INFO"

if os.getenv("AWS"):
    ENV_NAME = os.getenv("ENV_NAME")

    django_secret = get_secret("driveport/%s/Django/SecretKey" % ENV_NAME)
    SECRET_KEY = django_secret["DjangoSecretKey"]

    postgres_secret = get_secret("driveport/%s/DB/MasterUserPassword" % ENV_NAME)
    DATABASES["default"].update({"PASSWORD": postgres_secret["password"]})
else:
    SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "changeme")

SECURE_PROXY_SSL_HEADER = ("HTTP_X_FORWARDED_PROTO", "https")

CSRF_COOKIE_SECURE = True

if STORAGES["ingested"]["BACKEND"] != "storages.backends.s3boto3.S3Boto3Storage":
    raise ImproperlyConfigured(
        "AWS_STORAGE_BUCKET_NAME must be set so transfers are written to S3"
    )
