from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SCAFFOLDER_", env_file=".env", extra="ignore")

    app_name: str = "jakarta-scaffolder"
    log_level: str = "INFO"

    jakarta_ee_version: str = "11"
    persistence_unit: str = "defaultPU"

    java_source_dir: str = "src/main/java"
    resources_dir: str = "src/main/resources"
    webapp_dir: str = "src/main/webapp"

    state_file: str = ".scaffolder-state.json"

    http_timeout: float = 60.0

settings = Settings()
