"""AWS settings for the persistent geolocation store."""

from typing import Optional

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class AwsSettings(IntegrationSettings):
    """Region and endpoint of the DynamoDB table behind the persistent layer.

    Environment Variables:
        AWS_REGION: Region of the cache table (default: ca-central-1)
        DYNAMODB_ENDPOINT_URL: Endpoint override, e.g. http://localhost:8000
            for DynamoDB Local

    Credentials come from the default boto3 chain (task role, profile or
    environment), so none are configured here.
    """

    AWS_REGION: str = Field(default="ca-central-1", alias="AWS_REGION")
    DYNAMODB_ENDPOINT_URL: Optional[str] = Field(
        default=None, alias="DYNAMODB_ENDPOINT_URL"
    )
