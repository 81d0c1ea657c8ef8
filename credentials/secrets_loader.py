"""Loading of school API credentials from AWS Secrets Manager or the environment."""
import json
import logging
import os
from typing import Mapping, Optional

import boto3
from botocore.exceptions import ClientError

from processor.models import Credentials

logger = logging.getLogger(__name__)


class CredentialsError(Exception):
    """Raised when credentials cannot be loaded or are incomplete."""


# Secret JSON key -> Credentials field
SECRET_KEYS = {
    'userLogin': 'login',
    'userPassword': 'password',
    'serverBaseURL': 'server_base_url',
    'studentNumber': 'student_number',
}

# Environment variable -> Credentials field
ENV_KEYS = {
    'SCHOOL_LOGIN': 'login',
    'SCHOOL_PASSWORD': 'password',
    'SCHOOL_SERVER_BASE_URL': 'server_base_url',
    'SCHOOL_STUDENT_NUMBER': 'student_number',
}


def _build_credentials(values: Mapping[str, object], keys: Mapping[str, str],
                       source: str) -> Credentials:
    missing = [key for key in keys if not values.get(key)]
    if missing:
        raise CredentialsError(
            f"Credentials from {source} missing required keys: {', '.join(missing)}"
        )
    
    fields = {field: str(values[key]) for key, field in keys.items()}
    fields['server_base_url'] = fields['server_base_url'].rstrip('/')
    return Credentials(**fields)


def load_from_secrets_manager(secret_name: str,
                              region_name: Optional[str] = None) -> Credentials:
    """
    Load credentials from a JSON secret in AWS Secrets Manager.
    
    Args:
        secret_name: Secret name or ARN
        region_name: AWS region (default: boto3 configuration)
        
    Returns:
        Credentials object
        
    Raises:
        CredentialsError: If the secret cannot be read, decoded or is incomplete
    """
    logger.info(f"Loading credentials from secret: {secret_name}")
    client = boto3.client('secretsmanager', region_name=region_name)
    
    try:
        response = client.get_secret_value(SecretId=secret_name)
    except ClientError as e:
        logger.error(f"Error reading secret {secret_name}: {e}")
        raise CredentialsError(f"Unable to read secret {secret_name}: {e}") from e
    
    try:
        values = json.loads(response.get('SecretString') or '')
    except json.JSONDecodeError as e:
        raise CredentialsError(f"Secret {secret_name} is not valid JSON") from e
    
    if not isinstance(values, dict):
        raise CredentialsError(f"Secret {secret_name} is not a JSON object")
    
    return _build_credentials(values, SECRET_KEYS, f"secret {secret_name}")


def load_from_environment(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """Load credentials from SCHOOL_* environment variables."""
    if environ is None:
        environ = os.environ
    return _build_credentials(environ, ENV_KEYS, 'environment')


def load_credentials(environ: Optional[Mapping[str, str]] = None) -> Credentials:
    """
    Load credentials from Secrets Manager when SECRET_NAME is set,
    otherwise from the environment.
    """
    if environ is None:
        environ = os.environ
    
    secret_name = environ.get('SECRET_NAME')
    if secret_name:
        return load_from_secrets_manager(secret_name, environ.get('AWS_REGION'))
    return load_from_environment(environ)
