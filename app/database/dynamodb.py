import logging

import boto3
from botocore.exceptions import NoCredentialsError

from app import config
from app.services.errors import PersistenceError

logger = logging.getLogger(__name__)


def get_db_connection():
    try:
        dynamodb = boto3.resource(
            "dynamodb",
            endpoint_url=config.DYNAMODB_ENDPOINT_URL,
            region_name=config.AWS_DEFAULT_REGION,
            aws_access_key_id=config.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
        )
        return dynamodb
    except NoCredentialsError as e:
        logger.error("DynamoDB credentials not available")
        raise PersistenceError("DynamoDB credentials not available") from e
