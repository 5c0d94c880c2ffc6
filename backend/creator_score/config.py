from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    talent_api_key: str = ""
    talent_api_base_url: str = "https://api.talentprotocol.com"
    talent_request_timeout: float = 30.0
    talent_page_delay: float = 0.1
    snapshot_admin_api_key: str = ""
    boost_multiplier: float = 0.10
    token_holder_threshold: int = 100
    eligible_rank_cutoff: int = 200
    leaderboard_cache_ttl: int = 600
    boosted_cache_ttl: int = 3600
    decisions_cache_ttl: int = 60
    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
