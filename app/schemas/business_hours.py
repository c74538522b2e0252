from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from app.schemas.common import ClockTime


class BusinessHoursBase(BaseModel):
    day_of_week: int = Field(..., ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    open_time: Optional[ClockTime] = None
    close_time: Optional[ClockTime] = None
    is_closed: bool = False


class BusinessHoursUpdate(BusinessHoursBase):
    @model_validator(mode="after")
    def validate_open_close(self):
        if self.is_closed:
            return self
        if self.open_time is None or self.close_time is None:
            raise ValueError("open_time and close_time are required for an open day")
        if self.open_time >= self.close_time:
            raise ValueError("open_time must be before close_time")
        return self


class BusinessHoursBatchUpdate(BaseModel):
    hours: List[BusinessHoursUpdate] = Field(..., min_length=1, max_length=7)

    @model_validator(mode="after")
    def validate_unique_days(self):
        days = [entry.day_of_week for entry in self.hours]
        if len(days) != len(set(days)):
            raise ValueError("Each day_of_week may appear only once")
        return self


class BusinessHoursResponse(BusinessHoursBase):
    id: int
    business_id: int

    model_config = {"from_attributes": True}
