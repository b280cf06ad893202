"""Application configuration and environment settings"""
from typing import Optional
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

class HyperliquidSettings(BaseModel):
    """Hyperliquid specific settings"""
    api_url: str = Field(..., description="Hyperliquid info endpoint")
    page_size: int = Field(..., description="Maximum records returned per page")
    timeout: float = Field(..., description="Request timeout in seconds")

class Settings(BaseSettings):
    """Application settings loaded from environment variables"""
    # Hyperliquid settings
    HYPERLIQUID_API_URL: str = Field("https://api.hyperliquid.xyz/info", description="Hyperliquid info endpoint")
    HYPERLIQUID_PAGE_SIZE: int = Field(2000, description="Maximum fills/funding records per response")

    # CoinGecko settings
    COINGECKO_API_URL: str = Field("https://api.coingecko.com/api/v3", description="CoinGecko API base URL")
    COINGECKO_DEMO_API_KEY: Optional[str] = Field(None, description="CoinGecko demo API key")

    # Insight model settings
    GEMINI_API_KEY: Optional[str] = Field(None, description="Gemini API key")
    GEMINI_MODEL: str = Field("gemini-2.5-flash", description="Model used for token insights")
    GEMINI_BASE_URL: str = Field(
        "https://generativelanguage.googleapis.com/v1beta/openai/",
        description="OpenAI compatible endpoint for the insight model"
    )

    REQUEST_TIMEOUT: float = Field(15.0, description="Upstream request timeout in seconds")

    # Server settings
    HOST: str = Field("0.0.0.0", description="Interface to bind")
    PORT: int = Field(3000, description="Port to listen on")
    LOG_LEVEL: str = Field("INFO", description="Root log level")

    @property
    def hyperliquid_settings(self) -> HyperliquidSettings:
        """Get Hyperliquid settings as a separate model"""
        return HyperliquidSettings(
            api_url=self.HYPERLIQUID_API_URL,
            page_size=self.HYPERLIQUID_PAGE_SIZE,
            timeout=self.REQUEST_TIMEOUT
        )

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=True,
        extra='ignore'
    )

settings = Settings()
