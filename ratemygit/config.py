from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # GitHub OAuth
    github_client_id: str = ""
    github_client_secret: str = ""

    # GitHub API (public roast lookups use this token when set)
    github_token: str = ""
    github_user_agent: str = "changelog-app"

    # App
    app_secret_key: str = "change-me-in-production"
    app_base_url: str = "http://localhost:8000"
    frontend_url: str = "http://localhost:3000"

    # Session cookie
    session_cookie_name: str = "ratemygit_session"
    session_max_age_seconds: int = 86400

    # Logging
    log_level: str = "info"

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Deployment mode: "container" (default) or "lambda"
    deployment_mode: str = "container"

    # AWS (Lambda mode only)
    aws_region: str = "us-west-2"
    dynamodb_state_table: str = "ratemygit-oauth-states"
    oauth_state_ttl_seconds: int = 600

    # LLM providers
    anthropic_api_key: str = ""
    openai_api_key: str = ""
    claude_model: str = "claude-3-5-haiku-latest"
    openai_model: str = "gpt-4o-mini"

    # Roasts
    roast_cache_ttl_seconds: int = 900
    patch_max_chars: int = 8000
    patch_keep_lines: int = 100

    # GitHub proxy
    changelog_limit: int = 20
    repository_limit: int = 100

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
