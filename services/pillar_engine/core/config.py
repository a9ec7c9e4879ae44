import os
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file if it exists, for local development
# In production, environment variables should be set directly.
if os.path.exists(".env"):
    from dotenv import load_dotenv
    load_dotenv()


class PillarEngineSettings(BaseSettings):
    # None means the definitions bundled with the package
    definitions_path: Optional[str] = None
    log_level: str = "INFO"
    json_logs: bool = True
    # Keep the legacy barrier block inside 0-10; disable to reproduce old unclamped output
    clamp_barrier_block: bool = True
    trend_threshold: float = 0.5
    trend_window: int = 3
    reliability_alpha_threshold: float = 0.7

    model_config = SettingsConfigDict(env_prefix='PILLAR_ENGINE_')


# Instantiate settings
settings = PillarEngineSettings()
