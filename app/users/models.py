from pydantic import BaseModel, Field
from typing import Optional

# ==================== USER MODELS ====================

class UserRegister(BaseModel):
    first_name: Optional[str] = Field(None, alias="FirstName")
    last_name: Optional[str] = Field(None, alias="LastName")
    username: str = Field(..., alias="Username")
    email: str = Field(..., alias="Email")
    password: str = Field(..., alias="Password")

    class Config:
        populate_by_name = True


class UserLogin(BaseModel):
    data: str = Field(..., alias="Data")  # email or username
    password: str = Field(..., alias="Password")

    class Config:
        populate_by_name = True
