from datetime import time
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, PlainSerializer

from app.utils.validation import parse_hhmm


def _coerce_clock_time(value):
    if isinstance(value, str):
        return parse_hhmm(value)
    return value


# Wall-clock time exchanged as "HH:MM"
ClockTime = Annotated[
    time,
    BeforeValidator(_coerce_clock_time),
    PlainSerializer(lambda v: v.strftime("%H:%M"), return_type=str),
]


class BookingErrorDetail(BaseModel):
    """Machine-readable reason and human-readable message for a rejected booking."""

    reason: str
    message: str


class BookingErrorResponse(BaseModel):
    detail: BookingErrorDetail
