from datetime import datetime
from typing import List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field

from marketsync.core.enums import MarketplacePlatform
from marketsync.core.utils import utcnow


class PlatformAccount(BaseModel):
    """
    Connected seller account for one marketplace.

    Created when an OAuth redirect completes (or seeded from configured refresh
    tokens), afterwards mutated only by the AuthenticationManager on refresh.
    """
    id: UUID = Field(default_factory=uuid4)
    platform: MarketplacePlatform
    account_name: str
    access_token: str
    refresh_token: Optional[str] = None
    token_expires_at: Optional[datetime] = None
    scopes: List[str] = Field(default_factory=list)
    is_active: bool = True
    connected_at: datetime = Field(default_factory=utcnow)

    model_config = ConfigDict(validate_assignment=True)

    @property
    def is_token_expired(self) -> bool:
        if self.token_expires_at is None:
            return False
        return utcnow() > self.token_expires_at


class TokenGrant(BaseModel):
    """Result of a token endpoint exchange"""
    access_token: str
    refresh_token: Optional[str] = None
    expires_in: int = 3600
    scopes: List[str] = Field(default_factory=list)
