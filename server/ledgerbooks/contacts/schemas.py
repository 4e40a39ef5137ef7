from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, constr


ContactName = constr(strip_whitespace=True, min_length=1, max_length=200)


class ContactBase(BaseModel):
    name: ContactName
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class ContactCreate(ContactBase):
    pass


class ContactUpdate(BaseModel):
    name: Optional[ContactName] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None


class ContactResponse(ContactBase):
    id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
