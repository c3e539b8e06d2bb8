from pydantic import EmailStr, Field

from schemas.base import CamelModel


class UserCreate(CamelModel):
    email: EmailStr
    full_name: str = Field(min_length=1)
    phone: str
    address: str = ""
    password: str = Field(min_length=6)
