import boto3
from botocore.exceptions import ClientError

from app import config


def _resource():
    return boto3.resource(
        "dynamodb",
        endpoint_url=config.DYNAMODB_ENDPOINT_URL,
        region_name=config.AWS_DEFAULT_REGION,
        aws_access_key_id=config.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
    )


def create_table_if_not_exists(table_name=config.EVENTS_TABLE_NAME):
    """Create the events table if it doesn't exist"""
    dynamodb = _resource()

    try:
        # Check if table exists
        table = dynamodb.Table(table_name)
        table.table_status
        print(f"Table {table_name} already exists")
        return table
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise

    # One item per event document, so only the primary key is declared
    table = dynamodb.create_table(
        TableName=table_name,
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
        ],
        BillingMode="PAY_PER_REQUEST",
    )

    print(f"Creating table {table_name}...")
    table.wait_until_exists()
    print(f"Table {table_name} created successfully")
    return table


def delete_table(table_name=config.EVENTS_TABLE_NAME):
    """Delete the events table"""
    dynamodb = _resource()

    try:
        table = dynamodb.Table(table_name)
        table.delete()
        table.wait_until_not_exists()
        print(f"Table {table_name} deleted successfully")
    except ClientError as e:
        if e.response["Error"]["Code"] != "ResourceNotFoundException":
            raise
        print(f"Table {table_name} does not exist")


if __name__ == "__main__":
    create_table_if_not_exists()
