"""
Application configuration with layered loading.

Configuration precedence (highest to lowest):
1. Environment variables
2. config.yml values
3. Default values defined here
"""
import os
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import timezone, timedelta
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _find_project_root() -> Path:
    """Find the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "config.example.yml").exists() or (parent / "pyproject.toml").exists():
            return parent
    return Path(os.getenv("STREAKMIND_ROOT", Path.cwd()))


def _load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """Load configuration from YAML file if it exists."""
    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}")
        return {}

    try:
        import yaml
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Loaded configuration from {config_path}")
        return config
    except Exception as e:
        logger.error(f"Error loading config file {config_path}: {e}")
        return {}


def _get_nested(d: Dict, *keys, default=None):
    """Safely get a nested dictionary value."""
    for key in keys:
        if isinstance(d, dict):
            d = d.get(key, default)
        else:
            return default
    return d if d is not None else default


def _env_or_yaml(env_key: str, yaml_config: Dict, *yaml_keys, default=None):
    """Get value from environment variable, falling back to YAML config, then default."""
    env_value = os.getenv(env_key)
    if env_value is not None:
        return env_value

    yaml_value = _get_nested(yaml_config, *yaml_keys)
    if yaml_value is not None:
        return yaml_value

    return default


PROJECT_ROOT = _find_project_root()
YAML_CONFIG = _load_yaml_config(PROJECT_ROOT / "config.yml")

_paths_root = _env_or_yaml("STREAKMIND_ROOT", YAML_CONFIG, "paths", "root", default=str(PROJECT_ROOT))
_paths_data = _env_or_yaml("STREAKMIND_DATA_PATH", YAML_CONFIG, "paths", "data", default=f"{_paths_root}/data")
_paths_logs = _env_or_yaml("STREAKMIND_LOGS_PATH", YAML_CONFIG, "paths", "logs", default=f"{_paths_root}/logs")


class PathsConfig(BaseModel):
    """Path configuration."""
    root: Path = Path(_paths_root)
    data: Path = Path(_paths_data)
    logs: Path = Path(_paths_logs)


class UserConfig(BaseModel):
    """User-specific configuration."""
    name: str = _env_or_yaml("STREAKMIND_USER_NAME", YAML_CONFIG, "user", "name", default="friend")
    timezone_offset_hours: int = int(_env_or_yaml(
        "STREAKMIND_TIMEZONE_OFFSET", YAML_CONFIG, "user", "timezone_offset_hours", default=0
    ))

    @property
    def timezone(self):
        """Get user's timezone as a timezone object."""
        return timezone(timedelta(hours=self.timezone_offset_hours))


class LLMConfig(BaseModel):
    """LLM configuration."""
    base_url: str = _env_or_yaml("LLM_BASE_URL", YAML_CONFIG, "llm", "base_url", default="http://localhost:8000/v1")
    model_name: str = _env_or_yaml("LLM_MODEL_NAME", YAML_CONFIG, "llm", "model_name", default="Qwen/Qwen2.5-14B-Instruct")
    temperature: float = float(_env_or_yaml("LLM_TEMPERATURE", YAML_CONFIG, "llm", "temperature", default=0.7))
    api_key: str = _env_or_yaml("LLM_API_KEY", YAML_CONFIG, "llm", "api_key", default="not-needed")
    timeout_seconds: float = float(_env_or_yaml("LLM_TIMEOUT_SECONDS", YAML_CONFIG, "llm", "timeout_seconds", default=10))


class TrackingConfig(BaseModel):
    """Habit tracking behaviour."""
    stats_log_limit: int = int(_get_nested(YAML_CONFIG, "tracking", "stats_log_limit", default=50))
    max_activity_name_length: int = int(_get_nested(YAML_CONFIG, "tracking", "max_activity_name_length", default=50))
    streak_policy: str = _env_or_yaml("STREAKMIND_STREAK_POLICY", YAML_CONFIG, "tracking", "streak_policy", default="no_gap_check")
    # Earlier transcript messages sent along with each generated reply
    history_messages: int = int(_get_nested(YAML_CONFIG, "tracking", "history_messages", default=10))


class AuthConfig(BaseModel):
    """Authentication configuration."""
    api_key: Optional[str] = _env_or_yaml("STREAKMIND_API_KEY", YAML_CONFIG, "auth", "api_key", default=None)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = _env_or_yaml("STREAKMIND_LOG_LEVEL", YAML_CONFIG, "logging", "level", default="INFO")
    format: str = _get_nested(YAML_CONFIG, "logging", "format", default="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    to_file: bool = str(_env_or_yaml("STREAKMIND_LOG_TO_FILE", YAML_CONFIG, "logging", "to_file", default=True)).lower() == "true"
    file_name: str = _get_nested(YAML_CONFIG, "logging", "file_name", default="streakmind.log")


class Settings(BaseModel):
    """
    Application settings with layered configuration.

    Configuration is loaded from (in order of precedence):
    1. Environment variables
    2. config.yml
    3. Default values
    """

    paths: PathsConfig = Field(default_factory=PathsConfig)
    user: UserConfig = Field(default_factory=UserConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    tracking: TrackingConfig = Field(default_factory=TrackingConfig)
    auth: AuthConfig = Field(default_factory=AuthConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @property
    def data_path(self) -> Path:
        """Folder holding the JSON state documents."""
        return self.paths.data

    @property
    def state_file(self) -> Path:
        return self.paths.data / "habits.json"

    @property
    def transcript_file(self) -> Path:
        return self.paths.data / "messages.json"

    @property
    def settings_file(self) -> Path:
        return self.paths.data / "settings.json"

    @property
    def memory_file(self) -> Path:
        return self.paths.data / "memory.json"

    @property
    def user_timezone(self):
        return self.user.timezone

    @property
    def llm_base_url(self) -> str:
        return self.llm.base_url

    @property
    def llm_model_name(self) -> str:
        return self.llm.model_name

    @property
    def llm_temperature(self) -> float:
        return self.llm.temperature


settings = Settings()


# Environment variable behind each dotted key; keys missing here are YAML-only
ENV_KEYS = {
    "paths.root": "STREAKMIND_ROOT",
    "paths.data": "STREAKMIND_DATA_PATH",
    "paths.logs": "STREAKMIND_LOGS_PATH",
    "user.name": "STREAKMIND_USER_NAME",
    "user.timezone_offset_hours": "STREAKMIND_TIMEZONE_OFFSET",
    "llm.base_url": "LLM_BASE_URL",
    "llm.model_name": "LLM_MODEL_NAME",
    "llm.temperature": "LLM_TEMPERATURE",
    "llm.api_key": "LLM_API_KEY",
    "llm.timeout_seconds": "LLM_TIMEOUT_SECONDS",
    "tracking.streak_policy": "STREAKMIND_STREAK_POLICY",
    "auth.api_key": "STREAKMIND_API_KEY",
    "logging.level": "STREAKMIND_LOG_LEVEL",
    "logging.to_file": "STREAKMIND_LOG_TO_FILE",
}


def get_config_source(key: str) -> str:
    """
    Get the source of a configuration value.

    Returns 'env', 'yaml', or 'default'.
    """
    env_key = ENV_KEYS.get(key)
    if env_key and os.getenv(env_key) is not None:
        return "env"

    keys = key.split(".")
    yaml_value = _get_nested(YAML_CONFIG, *keys)
    if yaml_value is not None:
        return "yaml"

    return "default"
