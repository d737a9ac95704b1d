from datetime import datetime
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import List, Optional

def _normalize_slots(value: List[str]) -> List[str]:
    """Normalize "H:MM" / "HH:MM" / "HH:MM:SS" slot strings to "HH:MM"."""
    slots = []
    for raw in value:
        try:
            parsed = datetime.strptime(raw.strip()[:5], "%H:%M")
        except ValueError:
            raise ValueError(f"Invalid time slot: {raw}")
        slot = parsed.strftime("%H:%M")
        if slot not in slots:
            slots.append(slot)
    return slots

class DoctorBase(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20)
    specialty: str = Field(..., min_length=3, max_length=100)
    available_times: List[str] = Field(default_factory=list)

    @field_validator("available_times")
    @classmethod
    def validate_available_times(cls, v):
        return _normalize_slots(v)

class DoctorCreate(DoctorBase):
    password: str = Field(..., min_length=6)

class DoctorUpdate(DoctorBase):
    password: Optional[str] = Field(None, min_length=6)

class DoctorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    specialty: str
    available_times: List[str] = []

class AvailabilityResponse(BaseModel):
    doctor_id: int
    date: str
    available_times: List[str]
