from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Bank Return Decoder"
    DEBUG: bool = False
    ENV: str = "production"
    LOG_LEVEL: str = "INFO"

    # File uploads (staged here only while a file is being decoded)
    UPLOAD_DIR: str = "/tmp/bank-returns"
    MAX_UPLOAD_SIZE: int = 10 * 1024 * 1024  # 10MB
    ALLOWED_RETURN_EXTENSIONS: str = ".ret,.txt"

    @property
    def allowed_return_extensions_list(self) -> list[str]:
        """Parse ALLOWED_RETURN_EXTENSIONS into lowercase extensions with a leading dot."""
        extensions = []
        for ext in self.ALLOWED_RETURN_EXTENSIONS.split(","):
            ext = ext.strip().lower()
            if ext:
                extensions.append(ext if ext.startswith(".") else f".{ext}")
        return extensions

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS_ORIGINS string into a list of origins."""
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
