"""
Application Configuration Management

Loads configuration from environment variables (and an optional .env file).
The variable names used by the original portal deployment are accepted as
aliases. When running in AWS Lambda, Salesforce and Stripe secrets can be
pulled from AWS Secrets Manager by ARN.
"""

import json
import os
from functools import lru_cache
from typing import List, Optional

import boto3
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Settings that must be non-empty before the app can serve requests
REQUIRED_SECRETS = (
    "salesforce_client_id",
    "salesforce_client_secret",
    "salesforce_username",
    "salesforce_password",
    "stripe_api_key",
)

# A cached access token is refreshed this many seconds before it expires
TOKEN_EXPIRY_MARGIN_SECONDS = 300


class Settings(BaseSettings):
    """Application settings with validation"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development", description="Environment name")

    # Application
    app_name: str = Field(default="Donor Portal API")
    app_version: str = Field(default="1.0.0")
    log_level: str = Field(default="INFO")

    # Server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=4242)
    http_timeout: float = Field(default=30.0, description="Outbound HTTP timeout in seconds")

    # Salesforce OAuth (resource-owner password grant)
    salesforce_instance_url: str = Field(
        default="https://login.salesforce.com",
        validation_alias=AliasChoices("salesforce_instance_url", "api_salesforce_instate"),
        description="Salesforce instance URL",
    )
    salesforce_api_version: str = Field(
        default="v57.0",
        validation_alias=AliasChoices("salesforce_api_version", "api_version"),
    )
    salesforce_client_id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("salesforce_client_id", "api_salesforce_client_id"),
        description="Salesforce Connected App Client ID",
    )
    salesforce_client_secret: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("salesforce_client_secret", "api_salesforce_client_secret"),
        description="Salesforce Connected App Client Secret",
    )
    salesforce_username: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("salesforce_username", "api_salesforce_user_name"),
        description="Salesforce integration user username",
    )
    salesforce_password: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("salesforce_password", "api_salesforce_user_password"),
        description="Salesforce integration user password (with security token appended)",
    )
    salesforce_token_ttl: int = Field(
        default=5400, description="Seconds a fetched access token is reused"
    )
    salesforce_always_refresh_token: bool = Field(
        default=False,
        description="Fetch a new access token before every authenticated request",
    )

    # Salesforce record types
    household_record_type: str = Field(default="Household Account")
    donation_record_type: str = Field(default="Donation")

    # Stripe
    stripe_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("stripe_api_key", "vite_stripe_client_secret"),
        description="Stripe secret API key",
    )
    stripe_api_version: Optional[str] = Field(default=None)
    stripe_currency: str = Field(default="usd")

    # Portal links
    public_domain: str = Field(
        default="localhost:5173",
        validation_alias=AliasChoices("public_domain", "domain"),
        description="Public host of the portal front end, used in emailed links",
    )
    public_scheme: str = Field(default="http")

    # Passwords
    member_default_password_template: str = Field(
        default="Chfusa{year}!",
        description="Initial password for members added by a household owner",
    )
    password_hash_iterations: int = Field(default=390000)

    # Internal endpoints
    internal_api_key: Optional[str] = Field(
        default=None, description="Required X-Internal-Key for /internal routes when set"
    )

    # AWS
    aws_region: str = Field(default="us-east-1")

    # CORS
    cors_origins: List[str] = Field(default=["*"])
    cors_allow_credentials: bool = Field(default=False)
    cors_allow_methods: List[str] = Field(
        default=["GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"]
    )
    cors_allow_headers: List[str] = Field(default=["Content-Type", "Authorization"])

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level"""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v_upper

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment"""
        valid_envs = ["development", "staging", "production", "test"]
        v_lower = v.lower()
        if v_lower not in valid_envs:
            raise ValueError(f"Environment must be one of {valid_envs}")
        return v_lower

    @field_validator("salesforce_token_ttl")
    @classmethod
    def validate_token_ttl(cls, v: int) -> int:
        if v <= TOKEN_EXPIRY_MARGIN_SECONDS:
            raise ValueError(
                f"salesforce_token_ttl must be greater than {TOKEN_EXPIRY_MARGIN_SECONDS} seconds"
            )
        return v

    @field_validator("salesforce_instance_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development"""
        return self.environment == "development"

    @property
    def is_lambda(self) -> bool:
        """Check if running in AWS Lambda environment"""
        return bool(os.getenv("AWS_LAMBDA_FUNCTION_NAME"))

    @property
    def salesforce_token_url(self) -> str:
        """Get Salesforce OAuth token endpoint"""
        return f"{self.salesforce_instance_url}/services/oauth2/token"

    @property
    def public_base_url(self) -> str:
        """Base URL of the portal front end"""
        return f"{self.public_scheme}://{self.public_domain}"

    def validate_required_secrets(self) -> None:
        """
        Fail fast when a credential the portal cannot run without is unset.

        Raises:
            ValueError: Naming every missing setting
        """
        missing = [name for name in REQUIRED_SECRETS if not getattr(self, name)]
        if missing:
            raise ValueError(
                f"Missing required settings: {', '.join(missing)}. "
                "Set them in the environment or .env (legacy names such as "
                "API_SALESFORCE_CLIENT_ID are accepted), or provide "
                "SALESFORCE_SECRET_ARN / STRIPE_API_KEY_ARN in Lambda."
            )


def _fetch_secret_by_arn(arn: str, region: str) -> str:
    """
    Fetch a secret value from AWS Secrets Manager using ARN.

    Args:
        arn: The ARN of the secret
        region: AWS region

    Returns:
        The secret value as a string
    """
    try:
        client = boto3.client("secretsmanager", region_name=region)
        response = client.get_secret_value(SecretId=arn)
        return response.get("SecretString", "")
    except Exception as e:
        raise RuntimeError(f"Failed to retrieve secret from ARN {arn}: {e}") from e


# Keys of the Salesforce JSON secret mapped to the env vars they populate
SALESFORCE_SECRET_KEYS = {
    "client_id": "SALESFORCE_CLIENT_ID",
    "client_secret": "SALESFORCE_CLIENT_SECRET",
    "username": "SALESFORCE_USERNAME",
    "password": "SALESFORCE_PASSWORD",
    "instance_url": "SALESFORCE_INSTANCE_URL",
}


def _load_lambda_secrets() -> None:
    """Inject Secrets Manager values as env vars before Settings init."""
    region = os.getenv("AWS_REGION", "us-east-1")
    stripe_api_key_arn = os.getenv("STRIPE_API_KEY_ARN")
    salesforce_secret_arn = os.getenv("SALESFORCE_SECRET_ARN")

    if stripe_api_key_arn and not os.getenv("STRIPE_API_KEY"):
        os.environ["STRIPE_API_KEY"] = _fetch_secret_by_arn(stripe_api_key_arn, region)

    if salesforce_secret_arn:
        sf_secrets = json.loads(_fetch_secret_by_arn(salesforce_secret_arn, region))
        for key, env_var in SALESFORCE_SECRET_KEYS.items():
            value = sf_secrets.get(key)
            # Explicit environment wins over the secret
            if value and not os.getenv(env_var):
                os.environ[env_var] = str(value)


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    In a Lambda environment, secrets referenced by STRIPE_API_KEY_ARN and
    SALESFORCE_SECRET_ARN are fetched from Secrets Manager first.
    """
    if os.getenv("AWS_LAMBDA_FUNCTION_NAME"):
        try:
            _load_lambda_secrets()
        except Exception as e:
            # Settings validation below reports whatever is still missing
            print(f"Error loading secrets from Secrets Manager: {e}")

    settings = Settings()
    settings.validate_required_secrets()

    return settings


# Export singleton instance
settings = get_settings()
