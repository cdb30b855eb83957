from typing import Literal, Optional

from pydantic import BaseModel, Field

TeamStatus = Literal["active", "inactive"]

class TeamCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    status: TeamStatus = "active"
    members_count: int = Field(default=0, ge=0)

class TeamUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    status: Optional[TeamStatus] = None
    members_count: Optional[int] = Field(default=None, ge=0)
