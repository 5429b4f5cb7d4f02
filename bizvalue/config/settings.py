from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    methodology_path: str = ""
    default_iterations: int = 10_000
    default_variance_percent: float = 20.0
    default_distribution: str = "triangular"
    max_iterations: int = 50_000
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_prefix = "BIZVALUE_"
