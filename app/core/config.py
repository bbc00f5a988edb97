from pydantic_settings import BaseSettings
from typing import List, Literal

class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""
    
    # API
    API_PORT: int = 3001  # fallback port
    NODE_ENV: str = "development"
    
    # CORS, comma separated, e.g. https://a.com,https://b.com
    ALLOWED_ORIGINS: str = "*"
    
    # Store
    STORE_BACKEND: Literal["supabase", "memory"] = "supabase"
    SUPABASE_URL: str = ""
    SUPABASE_SERVICE_ROLE_KEY: str = ""
    SUBSCRIBERS_TABLE: str = "subscribers"
    
    # Brevo mail transport
    BREVO_API_KEY: str = ""
    BREVO_BASE_URL: str = "https://api.brevo.com/v3"
    SENDER_EMAIL: str = "no-reply@stylehub.example.com"
    SENDER_NAME: str = "StyleHub"
    MAIL_TIMEOUT_SECONDS: float = 30.0
    SUPPORT_EMAIL: str = "support@stylehub.example.com"
    WELCOME_CREDIT: int = 15  # dollars, quoted in both emails
    
    # Launch notifications
    LAUNCH_MODE: Literal["fixed_delay", "per_subscription"] = "fixed_delay"
    LAUNCH_DELAY_SECONDS: float = 20.0
    FOLLOW_UP_DELAY_SECONDS: float = 5.0
    FOLLOW_UP_WINDOW_SECONDS: float = 30.0
    # fixed_delay only: notify people who sign up after the site went live
    NOTIFY_LATE_SIGNUPS: bool = True
    
    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @property
    def allowed_origins(self) -> List[str]:
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

settings = Settings()
