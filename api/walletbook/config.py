from pydantic_settings import BaseSettings
from pydantic import Field, AnyUrl

class Settings(BaseSettings):
    app_name: str = "Walletbook API"
    app_env: str = Field("development", alias="APP_ENV")
    app_url: AnyUrl | str = Field("http://localhost:5173", alias="APP_URL")
    api_url: AnyUrl | str = Field("http://localhost:8000", alias="API_URL")

    postgres_url: str = Field(..., alias="POSTGRES_URL")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        case_sensitive = False
