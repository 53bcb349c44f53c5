from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


APP_NAME = "devops-demo-app"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    host: str = Field(default="0.0.0.0", alias="HOST")
    port: int = Field(default=3000, alias="PORT")
    environment: str = Field(default="development", alias="NODE_ENV")
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    namespace: str = Field(default="default", alias="NAMESPACE")
    pod_name: str = Field(default="unknown", alias="POD_NAME")
    node_name: str = Field(default="unknown", alias="NODE_NAME")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
