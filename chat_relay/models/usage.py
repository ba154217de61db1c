from pydantic import BaseModel


class UsageResponse(BaseModel):
    identifier: str  # Originating address the quota is tracked under
    limit: int
    count: int  # Messages charged today (UTC)
    remaining: int
    allowed: bool
    enforced: bool  # False when the relay does not consult the limiter
