from pydantic import BaseModel, Field, model_validator
from typing import Optional, List
from datetime import datetime

from app.models.user import User


def _now() -> str:
    return datetime.now().isoformat()


class ApiResponse(BaseModel):
    """
    Status envelope for success and error signaling.
    """
    status: str
    message: str
    data: Optional[User] = None
    timestamp: str = Field(default_factory=_now)

    @classmethod
    def success(cls, message: str, data: Optional[User] = None) -> "ApiResponse":
        return cls(status="success", message=message, data=data)

    @classmethod
    def error(cls, message: str) -> "ApiResponse":
        return cls(status="error", message=message)


class UsersResponse(BaseModel):
    """
    List envelope. `count` always equals len(users).
    """
    users: List[User] = Field(default_factory=list)
    count: int = 0
    status: str = "success"

    @model_validator(mode="after")
    def sync_count(self):
        self.count = len(self.users)
        return self
