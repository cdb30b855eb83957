from typing import Literal, Optional

from pydantic import BaseModel, Field

ProjectStatus = Literal["active", "inactive"]

class ProjectCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    owner_id: int
    status: ProjectStatus = "active"

class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = None
    owner_id: Optional[int] = None
    status: Optional[ProjectStatus] = None
