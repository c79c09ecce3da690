from pydantic import BaseModel

class AccommodationStatusIn(BaseModel):
    status: str
