"""
Application Configuration
"""
from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # App
    app_name: str = "VidVault Media Uploader"
    app_version: str = "0.1.0"
    debug: bool = True

    # Database
    database_url: str = "sqlite:///./vidvault.db"

    # API
    cors_origins: list = ["http://localhost:3000"]
    api_base_url: str = "http://localhost:8000"
    host: str = "0.0.0.0"
    port: int = 8000

    # Identity (JWT)
    jwt_secret: str = "change-me"
    jwt_alg: str = "HS256"
    jwt_expires_minutes: int = 60 * 24
    auth_cookie_name: str = "access_token"

    # Access gate
    public_page_paths: list = ["/signin", "/signup", "/", "/home"]
    public_api_paths: list = ["/api/videos"]
    home_path: str = "/home"
    signin_path: str = "/signin"
    api_prefix: str = "/api"
    gate_exempt_prefixes: list = ["/static", "/docs", "/redoc", "/openapi.json", "/health", "/favicon.ico"]

    # Hosted media service (Cloudinary)
    media_host_cloud_name: str = ""
    media_host_base_url: str = "https://api.cloudinary.com/v1_1"
    media_host_delivery_url: str = "https://res.cloudinary.com"
    media_host_timeout: float = 300.0
    video_upload_preset: str = "cloudnary-saas"
    video_folder: str = "video"
    image_upload_preset: str = "cloudnary-saas"
    image_folder: str = "images"

    # Upload limits
    max_video_size: int = 70 * 1024 * 1024  # 70MB

    # Upload client
    error_reset_seconds: float = 3.0

    class Config:
        env_file = ".env"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
