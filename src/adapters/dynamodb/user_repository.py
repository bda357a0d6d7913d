"""
DynamoDB User Store - Implements UserStorePort.
"""

from decimal import Decimal
from typing import Any

import boto3
from botocore.exceptions import ClientError

from src.domain.entities.user import UserRecord
from src.domain.exceptions import UserNotFoundError
from src.domain.ports.storage_port import UserStorePort
from src.infrastructure.config import Settings
from src.infrastructure.logging import get_logger

logger = get_logger(__name__)


def convert_floats_to_decimal(obj: Any) -> Any:
    """Convert float values to Decimal for DynamoDB compatibility."""
    if isinstance(obj, float):
        return Decimal(str(obj))
    elif isinstance(obj, dict):
        return {k: convert_floats_to_decimal(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_floats_to_decimal(v) for v in obj]
    return obj


def convert_decimals_to_float(obj: Any) -> Any:
    """Convert Decimal values back to float."""
    if isinstance(obj, Decimal):
        return float(obj)
    elif isinstance(obj, dict):
        return {k: convert_decimals_to_float(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [convert_decimals_to_float(v) for v in obj]
    return obj


class DynamoDBUserStore(UserStorePort):
    """
    DynamoDB implementation of UserStorePort.

    One item per user keyed by ``pk`` = user id, holding both lists.
    """

    def __init__(self, settings: Settings, table: Any = None):
        """
        Initialize DynamoDB store.

        Args:
            settings: Application settings with AWS credentials.
            table: Optional pre-built table resource (tests pass a mock).
        """
        self.settings = settings
        self.table_name = settings.dynamodb_table_name

        if table is not None:
            self.dynamodb = None
            self.table = table
            return

        client_kwargs: dict[str, Any] = {
            "region_name": settings.aws_region,
        }

        # Use local endpoint for development
        if settings.use_local_dynamodb:
            client_kwargs["endpoint_url"] = settings.dynamodb_endpoint_url
            logger.info("Using local DynamoDB", endpoint=settings.dynamodb_endpoint_url)

        if settings.aws_access_key_id and settings.aws_secret_access_key:
            client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
            client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key

        self.dynamodb = boto3.resource("dynamodb", **client_kwargs)
        self.table = self.dynamodb.Table(self.table_name)

    async def initialize_table(self) -> None:
        """Create the users table if it doesn't exist."""
        client = self.dynamodb.meta.client
        try:
            client.describe_table(TableName=self.table_name)
            logger.debug("Table exists", table=self.table_name)
        except ClientError as e:
            if e.response["Error"]["Code"] != "ResourceNotFoundException":
                raise
            logger.info("Creating table", table=self.table_name)
            client.create_table(
                TableName=self.table_name,
                KeySchema=[{"AttributeName": "pk", "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": "pk", "AttributeType": "S"}],
                BillingMode="PAY_PER_REQUEST",
            )
            waiter = client.get_waiter("table_exists")
            waiter.wait(TableName=self.table_name)
            logger.info("Table created", table=self.table_name)

    async def get_user(self, user_id: str) -> UserRecord:
        """Retrieve a user record by id."""
        logger.debug("Getting user", pk=user_id)

        response = self.table.get_item(Key={"pk": user_id})
        item = response.get("Item")
        if not item:
            raise UserNotFoundError(user_id)

        item = convert_decimals_to_float(item)
        item.pop("pk", None)
        return UserRecord.from_dict(item)

    async def save_user(self, record: UserRecord) -> None:
        """Replace a user record."""
        logger.debug("Saving user", pk=record.user_id)

        item = {"pk": record.user_id, **convert_floats_to_decimal(record.to_dict())}
        try:
            self.table.put_item(Item=item)
        except ClientError as e:
            logger.error("Failed to save user", pk=record.user_id, error=str(e))
            raise

    async def create_user(self, user_id: str) -> UserRecord:
        """Create an empty record unless one exists."""
        record = UserRecord(user_id=user_id)
        item = {"pk": user_id, **convert_floats_to_decimal(record.to_dict())}
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(pk)",
            )
            logger.info("Created user", pk=user_id)
            return record
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return await self.get_user(user_id)
            raise
