from pydantic import BaseModel
from typing import Optional

class TokenData(BaseModel):
    # 'sub' carries the user id, 'role' the caller's role
    user_id: Optional[int] = None
    role: Optional[str] = None
