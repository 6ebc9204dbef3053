import json
import os

import boto3
from botocore.exceptions import ClientError
from django.core.exceptions import ImproperlyConfigured

AWS_DEFAULT_REGION = os.getenv("AWS_DEFAULT_REGION", "us-east-1")


def get_secret(secret_name):
    """
    Load a JSON secret from AWS Secrets Manager and return it as a dict

    Missing or unreadable secrets are configuration errors, so they are raised
    as ImproperlyConfigured rather than left for a later KeyError.
    """
    session = boto3.session.Session()
    client = session.client(
        service_name="secretsmanager",
        region_name=AWS_DEFAULT_REGION,
        endpoint_url="https://secretsmanager.%s.amazonaws.com" % AWS_DEFAULT_REGION,
    )

    try:
        response = client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        code = e.response.get("Error", {}).get("Code", "Unknown")
        raise ImproperlyConfigured(
            "Unable to read secret %s (%s)" % (secret_name, code)
        ) from e

    if "SecretString" in response:
        raw = response["SecretString"]
    else:
        raw = response["SecretBinary"].decode("utf-8")

    try:
        return json.loads(raw)
    except ValueError as e:
        raise ImproperlyConfigured(
            "Secret %s does not contain valid JSON" % secret_name
        ) from e
