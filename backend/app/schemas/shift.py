from pydantic import BaseModel


class ShiftResponse(BaseModel):
    id: str
    name: str
    start_time: str
    end_time: str

    class Config:
        from_attributes = True
