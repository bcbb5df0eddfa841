from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./assessments.db"
    COMPANY_NAME: str = "NXTKonekt"
    COMPANY_EMAIL: str = "support@nxtkonekt.com"
    PUBLIC_BASE_URL: str = ""

    # Pricing
    HOURLY_RATE: float = 190.00
    CABLE_COST_PER_FOOT: float = 14.50
    QUOTE_VALID_DAYS: int = 30

    # Auth
    JWT_SECRET: str = ""  # required in production; auth fails loudly when unset
    JWT_ALGORITHM: str = "HS256"
    JWT_ACCESS_EXPIRE_MINUTES: int = 15
    JWT_REFRESH_EXPIRE_DAYS: int = 30
    ADMIN_EMAILS: str = ""  # comma-separated; these accounts get the admin role on register
    INVITATION_EXPIRE_DAYS: int = 7

    # Uploads
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_MB: int = 50
    MAX_FILES_PER_UPLOAD: int = 10

    # Cloudflare R2 (optional). Local uploads/ is used when unset
    CLOUDFLARE_R2_ACCOUNT_ID: str = ""
    CLOUDFLARE_R2_ACCESS_KEY_ID: str = ""
    CLOUDFLARE_R2_SECRET_ACCESS_KEY: str = ""
    CLOUDFLARE_R2_BUCKET: str = "site-assessments"

    class Config:
        env_file = ".env"

    @property
    def admin_emails(self) -> set[str]:
        return {e.strip().lower() for e in self.ADMIN_EMAILS.split(",") if e.strip()}


settings = Settings()
