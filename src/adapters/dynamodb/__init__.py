"""
DynamoDB adapter package.
"""

from src.adapters.dynamodb.user_repository import DynamoDBUserStore

__all__ = [
    "DynamoDBUserStore",
]
