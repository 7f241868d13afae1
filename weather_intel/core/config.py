"""Application settings loaded from environment variables."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "Weather Intelligence Hub"
    app_version: str = "0.1.0"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8000
    database_url: str = "sqlite:///./weather_intel.db"
    # WeatherAPI.com current conditions
    weather_api_url: str = "https://api.weatherapi.com/v1/current.json"
    weather_api_key: str = ""
    weather_api_timeout: float = 10.0
    weather_demo_mode: bool = False
    # Advisory text: "rules" or "ai"
    advisory_mode: str = "rules"
    openai_api_url: str = "https://api.openai.com/v1/chat/completions"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"
    openai_timeout: float = 10.0
    openai_max_tokens: int = 100
    # Delivery strategies, tried in this order before the log-only fallback.
    # From the environment this must be a JSON list: DELIVERY_STRATEGIES='["resend","formsubmit"]'
    delivery_strategies: tuple[str, ...] = ("formsubmit", "web3forms", "getform", "resend")
    delivery_timeout: float = 10.0
    formsubmit_url: str = "https://formsubmit.co/ajax/"
    formsubmit_inbox: str = ""
    web3forms_url: str = "https://api.web3forms.com/submit"
    web3forms_access_key: str = ""
    getform_url: str = ""
    resend_api_url: str = "https://api.resend.com/emails"
    resend_api_key: str = ""
    sender_name: str = "Weather Intelligence Hub"
    sender_email: str = ""
    notification_log_size: int = 50

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()

__all__ = ["settings", "Settings"]
