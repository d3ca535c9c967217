"""
Configuration management for the Clearance Extraction Engine.
Handles environment variables and application settings.
"""
import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Application configuration loaded from environment variables."""

    # Server settings
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"

    # Storefront origin used to resolve relative product/image URLs
    BASE_ORIGIN: str = os.getenv("BASE_ORIGIN", "https://www.rona.ca")

    # Discount filter (inclusive)
    DISCOUNT_THRESHOLD: int = int(os.getenv("DISCOUNT_THRESHOLD", "50"))

    # Response capture bounds
    MAX_CAPTURES: int = int(os.getenv("MAX_CAPTURES", "20"))
    MIN_BODY_BYTES: int = int(os.getenv("MIN_BODY_BYTES", "2000"))
    MAX_BODY_BYTES: int = int(os.getenv("MAX_BODY_BYTES", str(5 * 1024 * 1024)))
    CAPTURE_URL_PATTERN: str = os.getenv(
        "CAPTURE_URL_PATTERN",
        r"catalog|search|product|clearance|promo|browse|graphql|/api/|/wcs/",
    )

    # Safety cap for walking captured JSON payloads
    MAX_WALK_DEPTH: int = int(os.getenv("MAX_WALK_DEPTH", "32"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "json")  # json or console

    @classmethod
    def capture_bounds(cls) -> dict:
        """Return the capture buffer bounds as keyword arguments."""
        return {
            "max_captures": cls.MAX_CAPTURES,
            "min_body_bytes": cls.MIN_BODY_BYTES,
            "max_body_bytes": cls.MAX_BODY_BYTES,
            "url_pattern": cls.CAPTURE_URL_PATTERN,
        }


config = Config()
