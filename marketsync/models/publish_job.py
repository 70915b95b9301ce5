from typing import Optional, Set
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

from marketsync.core.enums import JobState, MarketplacePlatform


class PublishJobStatus(BaseModel):
    """
    InFlight | Succeeded | Failed(reason).

    The reason is present exactly when the state is FAILED. Build instances with
    the in_flight/succeeded/failed constructors.
    """
    state: JobState
    reason: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='after')
    def check_reason(self):
        if self.state == JobState.FAILED and not self.reason:
            raise ValueError('A failed status needs a reason')
        if self.state != JobState.FAILED and self.reason is not None:
            raise ValueError(f'{self.state.value} status cannot carry a reason')
        return self

    @classmethod
    def in_flight(cls) -> "PublishJobStatus":
        return cls(state=JobState.IN_FLIGHT)

    @classmethod
    def succeeded(cls) -> "PublishJobStatus":
        return cls(state=JobState.SUCCEEDED)

    @classmethod
    def failed(cls, reason) -> "PublishJobStatus":
        return cls(state=JobState.FAILED, reason=str(reason) or type(reason).__name__)

    @property
    def is_retryable(self) -> bool:
        if self.state == JobState.FAILED:
            return True
        elif self.state in (JobState.IN_FLIGHT, JobState.SUCCEEDED):
            return False
        raise ValueError(f"Unhandled job state: {self.state}")


class PublishJob(BaseModel):
    """Tracks publishing one product to a set of platforms."""
    id: UUID = Field(default_factory=uuid4)
    product_id: UUID
    platforms: Set[MarketplacePlatform]
    status: PublishJobStatus = Field(default_factory=PublishJobStatus.in_flight)
    retry_count: int = 0
    last_error: Optional[str] = None
    # Platforms with a listing created by this job; retries skip them.
    published_platforms: Set[MarketplacePlatform] = Field(default_factory=set)

    @property
    def pending_platforms(self) -> Set[MarketplacePlatform]:
        return self.platforms - self.published_platforms

    def is_retryable(self, max_retries: int) -> bool:
        return self.status.is_retryable and self.retry_count < max_retries
