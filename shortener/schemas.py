from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional


class ShortenRequest(BaseModel):
    # checked by the service so that bad input gets a 400, not a 422
    url: Optional[str] = None


class LinkResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    code: str
    original_url: str = Field(serialization_alias="longUrl")
    short_url: str = Field(serialization_alias="shortUrl")
    created_at: datetime = Field(serialization_alias="createdAt")


class LinkInfoResponse(LinkResponse):
    hits: int


class HealthResponse(BaseModel):
    ok: bool = True
