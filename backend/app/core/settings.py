import os


def _env_list(name: str, default: tuple[str, ...]) -> tuple[str, ...]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


class Settings:
    def __init__(self):
        self.app_name = "Estate CRM"
        self.api_version = "1.0.0"
        self.environment = os.getenv("ENVIRONMENT", "development")
        self.secret_key = os.getenv("SECRET_KEY", "CHANGE_ME")
        self.SECRET_KEY = self.secret_key
        self.access_token_expire_minutes = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
        self.ACCESS_TOKEN_EXPIRE_MINUTES = self.access_token_expire_minutes
        self.database_url = os.getenv("DATABASE_URL", "sqlite:///./estate_crm.db")
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()

        # Pipeline buckets consulted by the automatic status rule
        self.lead_active_statuses = _env_list(
            "LEAD_ACTIVE_STATUSES", ("new", "contacted", "qualified", "proposal", "negotiation")
        )
        self.property_open_statuses = _env_list(
            "PROPERTY_OPEN_STATUSES", ("available", "pending", "vacant", "in_development")
        )


_settings_instance = None


def get_settings():
    """Return a singleton Settings instance."""
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance
