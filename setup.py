#!/usr/bin/env python
from setuptools import find_packages, setup

VERSION = "0.1.0"
INSTALL_REQUIREMENTS = [
    "boto3",
    "celery[redis]>=5.3",
    "Django>=4.2",
    "django-storages[s3]>=1.14",
    "django-structlog",
    "djangorestframework",
    "psycopg2-binary",
    "requests",
    "sentry-sdk",
    "structlog",
    "urllib3",
]
EXTRAS_REQUIRE = {"test": ["pytest", "pytest-django"]}
SCRIPTS = ["manage.py"]
DESCRIPTION = "Asynchronous transfer of remote URLs into file storage"
CLASSIFIERS = """\
Environment :: Web Environment
Framework :: Django
Framework :: Celery
Programming Language :: Python
Programming Language :: Python :: 3
""".splitlines()

with open("README.md", "r") as f:
    LONG_DESCRIPTION = f.read()


setup(
    name="driveport",
    version=VERSION,
    description=DESCRIPTION,
    long_description=LONG_DESCRIPTION,
    long_description_content_type="text/markdown",
    packages=find_packages(
        include=["driveport", "driveport.*", "ingestion", "ingestion.*"]
    ),
    include_package_data=True,
    scripts=SCRIPTS,
    install_requires=INSTALL_REQUIREMENTS,
    extras_require=EXTRAS_REQUIRE,
    python_requires=">=3.10",
    classifiers=CLASSIFIERS,
)
