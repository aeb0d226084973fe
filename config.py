"""Runtime configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Page 1 holds the schema table and is the conventional traversal entry point
DEFAULT_ROOT_PAGE = 1

# Real files stay within 20 levels
DEFAULT_MAX_TREE_DEPTH = 64


class Settings(BaseSettings):
    """Settings loaded from MAGPIE_* environment variables."""

    model_config = SettingsConfigDict(env_prefix="MAGPIE_", env_file=".env", extra="ignore")

    root_page: int = DEFAULT_ROOT_PAGE
    log_level: str = "WARNING"
    max_tree_depth: int = DEFAULT_MAX_TREE_DEPTH

    # Index interior pages: also descend into the right-most child
    include_index_right_most: bool = False


settings = Settings()
