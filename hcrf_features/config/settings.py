from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Logging
    log_level: str = "INFO"

    # Feature kinds built by FeatureGenerator.from_settings, in index-allocation order
    feature_kinds: List[str] = ["raw", "edge"]

    # GateNodeFeatures construction parameters
    nb_gates: int = 1
    window_size: int = 0

    model_config = SettingsConfigDict(env_prefix="HCRF_", env_file=".env", extra="ignore")


settings = Settings()
