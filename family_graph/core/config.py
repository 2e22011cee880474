from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_NAME: str = "FamilyGraphAPI"
    APP_ENV: str = "dev"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = 8000
    LOG_LEVEL: str = "info"

    APP_CORS_ORIGINS: str = "http://localhost:3000"
    @property
    def CORS_ORIGINS(self) -> List[str]:
        return [o.strip() for o in self.APP_CORS_ORIGINS.split(",") if o.strip()]

    # Tree layout (pixels)
    TREE_NODE_WIDTH: float = 190
    TREE_NODE_HEIGHT: float = 72
    TREE_SPOUSE_GAP: float = 60
    TREE_CLUSTER_GAP: float = 40
    TREE_GROUP_GAP: float = 60
    TREE_LAYER_GAP: float = 120
    TREE_MARGIN: float = 40

    # View defaults
    DEFAULT_EXPAND_MODE: Literal["ancestors", "descendants", "both", "all"] = "all"
    DEFAULT_MAX_DEPTH: int = 3
    MAX_DEPTH_LIMIT: int = 25

settings = Settings()
