from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    app_host: str = "0.0.0.0"
    app_port: int = 8000

    base_url: str = "http://localhost:8000"
    redis_url: str = "redis://redis:6379/0"

    # no default on purpose: a missing secret must fail loudly
    jwt_secret: str | None = None
    session_ttl_seconds: int = 7 * 24 * 60 * 60

    admin_email: str | None = None
    admin_author: str = "Site Admin"

    magic_link_ttl_seconds: int = 15 * 60
    magic_link_used_ttl_seconds: int = 60
    magic_link_reuse_window_ms: int = 5000

    resend_api_key: str | None = None
    resend_api_url: str = "https://api.resend.com/emails"
    email_from: str = "Admin <noreply@localhost>"

    github_token: str | None = None
    github_repo: str = "owner/site"
    github_branch: str | None = None
    github_api_base: str = "https://api.github.com"
    github_timeout_seconds: float = 10.0
    updates_data_path: str = "public/updates/data"
    images_path: str = "public/images/updates"
    public_images_prefix: str = "/images/updates"

    save_max_attempts: int = 2
    max_content_bytes: int = 100 * 1024
    max_image_bytes: int = 5 * 1024 * 1024

    # rate limiting (token store)
    rate_limit_enabled: bool = True
    # only behind cloudflare, which overwrites the header; otherwise any client can spoof it
    trust_cf_connecting_ip: bool = False
    rate_limit_send_link_per_window: int = 10
    rate_limit_window_seconds: int = 60

settings = Settings()
