# config.py
import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    schema: str
    default_unit_price: int
    base_currency: str
    business_name: str
    business_address: str
    business_contact: str
    log_level: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning("Invalid %s=%r, using %d", name, raw, default)
        return default


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        schema=os.getenv("SCHEMA", "public"),
        default_unit_price=_int_env("DEFAULT_UNIT_PRICE", 100_000),
        base_currency=os.getenv("BASE_CURRENCY", "IDR"),
        business_name=os.getenv("BUSINESS_NAME", "Nihong Jastip"),
        business_address=os.getenv("BUSINESS_ADDRESS", "Depok/Jakarta/Kendal"),
        business_contact=os.getenv("BUSINESS_CONTACT", "jastipnihong@gmail.com • 085156775933"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
    )


def configure_logging(level: Optional[str] = None) -> None:
    """
    Set up root logging once. Streamlit reruns the page script on every
    interaction, basicConfig is a no-op after the first call.
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format=LOG_FORMAT,
    )
