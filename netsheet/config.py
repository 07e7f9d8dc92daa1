"""Application settings loaded from the environment or a ``.env`` file."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="NETSHEET_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    log_level: str = "INFO"

    # Form defaults
    default_county: str = "Marion"
    closing_offset_days: int = 10
    default_sale_price: str = "330,000"
    default_prior_year_tax: str = "3,200"

    # PDF export
    brand_title: str = "Indiana Home Title"
    pdf_max_fee_lines: int = 12


@lru_cache()
def get_settings() -> Settings:
    return Settings()
