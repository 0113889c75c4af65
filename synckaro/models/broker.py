"""BrokerConfig data model."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from synckaro.models.base import Entity


class BrokerConfig(Entity):
    """Broker credentials and connection state for one user (teacher or student)."""

    user_id: str = Field(..., min_length=1, description="Teacher or student ID")
    broker_provider: str = Field(..., min_length=1, description="Broker name (e.g. Zerodha)")
    api_key: str = Field(..., description="Broker API key")
    api_secret: str = Field(..., description="Broker API secret")
    access_token: Optional[str] = Field(default=None, description="Session access token")
    is_connected: bool = Field(default=False, description="Whether the last check succeeded")
    last_checked: Optional[datetime] = Field(default=None, description="Last connection check")
