from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    environment: str = "development"
    debug: bool = True

    # Backend API
    api_base_url: str = "http://localhost:5000"
    request_timeout: float = 10.0

    # Auth
    auth_path: str = "/auth"
    wizard_entry_path: str = "/?openNewWizard=1"
    supabase_jwt_secret: str = ""
    supabase_jwt_algorithm: str = "HS256"

    # Wizard behaviour
    autosave_debounce_seconds: float = 0.8
    social_validation_debounce_seconds: float = 0.5
    forbidden_words_ttl: int = 300  # 5 minutes
    max_upload_bytes: int = 10 * 1024 * 1024  # 10MB
    # uploaded → processing → indexed, seconds after upload
    file_status_delays: tuple[float, float, float] = (1.0, 2.0, 4.0)

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
