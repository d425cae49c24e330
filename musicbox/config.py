from typing import Optional
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database configuration settings"""
    url: str = Field(..., description="Database connection URL")

    @field_validator('url')
    @classmethod
    def validate_database_url(cls, v):
        if not v:
            raise ValueError("DATABASE_URL is required")
        if not v.startswith(('postgresql://', 'postgresql+psycopg2://', 'sqlite://')):
            raise ValueError("DATABASE_URL must be a valid database URL")
        return v


class AuthSettings(BaseModel):
    """Bearer token verification settings"""
    jwt_secret_key: str = Field(..., min_length=32, description="JWT verification key for HS256 tokens")
    algorithm: str = Field(default="HS256", description="JWT algorithm")
    jwks_url: Optional[str] = Field(default=None, description="Identity provider JWKS endpoint (RS256)")
    audience: Optional[str] = Field(default=None, description="Expected 'aud' claim")
    issuer: Optional[str] = Field(default=None, description="Expected 'iss' claim")

    @field_validator('algorithm')
    @classmethod
    def validate_algorithm(cls, v):
        valid_algorithms = ['HS256', 'HS384', 'HS512', 'RS256']
        if v.upper() not in valid_algorithms:
            raise ValueError(f"ALGORITHM must be one of: {', '.join(valid_algorithms)}")
        return v.upper()


class StorageSettings(BaseModel):
    """Blob storage settings used to sign streaming URLs"""
    connection_string: Optional[str] = Field(default=None, description="Azure storage connection string")
    container: str = Field(default="songs", description="Blob container holding the audio files")
    stream_url_ttl_minutes: int = Field(default=60, ge=1, description="Validity of a signed streaming URL")


class AppSettings(BaseModel):
    """General application settings"""
    environment: str = Field(default="development", description="Application environment")
    frontend_url: str = Field(..., description="Frontend application URL")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ['development', 'staging', 'production']
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT must be one of: {', '.join(valid_envs)}")
        return v.lower()


class Settings(BaseSettings):
    """Main settings class that combines all configuration sections"""

    # Database settings
    database_url: str = Field(..., alias="DATABASE_URL")

    # Auth settings
    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    algorithm: str = Field(default="HS256", alias="ALGORITHM")
    auth_jwks_url: Optional[str] = Field(default=None, alias="AUTH_JWKS_URL")
    auth_audience: Optional[str] = Field(default=None, alias="AUTH_AUDIENCE")
    auth_issuer: Optional[str] = Field(default=None, alias="AUTH_ISSUER")

    # Blob storage settings
    azure_storage_connection_string: Optional[str] = Field(default=None, alias="AZURE_STORAGE_CONNECTION_STRING")
    azure_storage_container: str = Field(default="songs", alias="AZURE_STORAGE_CONTAINER")
    stream_url_ttl_minutes: int = Field(default=60, alias="STREAM_URL_TTL_MINUTES")

    # Pagination
    default_page_size: int = Field(default=10, alias="DEFAULT_PAGE_SIZE")
    max_page_size: int = Field(default=100, alias="MAX_PAGE_SIZE")

    # App settings
    environment: str = Field(default="development", alias="ENVIRONMENT")
    frontend_url: str = Field(default="http://localhost:3000", alias="FRONTEND_URL")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    sentry_dsn: Optional[str] = Field(default=None, alias="SENTRY_DSN")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings as a structured object"""
        return DatabaseSettings(url=self.database_url)

    @property
    def auth(self) -> AuthSettings:
        """Get auth settings as a structured object"""
        return AuthSettings(
            jwt_secret_key=self.jwt_secret_key,
            algorithm=self.algorithm,
            jwks_url=self.auth_jwks_url,
            audience=self.auth_audience,
            issuer=self.auth_issuer
        )

    @property
    def storage(self) -> StorageSettings:
        """Get blob storage settings as a structured object"""
        return StorageSettings(
            connection_string=self.azure_storage_connection_string,
            container=self.azure_storage_container,
            stream_url_ttl_minutes=self.stream_url_ttl_minutes
        )

    @property
    def app(self) -> AppSettings:
        """Get app settings as a structured object"""
        return AppSettings(
            environment=self.environment,
            frontend_url=self.frontend_url,
            log_level=self.log_level
        )

    @property
    def cors_origins(self) -> list[str]:
        """Get CORS origins based on environment"""
        base_origins = [
            "http://localhost:3000",
            "http://127.0.0.1:3000"
        ]

        if self.app.environment == "production":
            base_origins.append(self.frontend_url)

        return base_origins

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.app.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.app.environment == "production"


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance (singleton pattern)"""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
