from pydantic import BaseModel, Field
from typing import List, Optional

class PrescriptionCreate(BaseModel):
    appointment_id: int
    patient_name: str = Field(..., min_length=3, max_length=100)
    medication: str = Field(..., min_length=3, max_length=100)
    dosage: str = Field(..., min_length=1, max_length=100)
    doctor_notes: Optional[str] = Field(None, max_length=200)

class PrescriptionResponse(PrescriptionCreate):
    id: str

class PrescriptionList(BaseModel):
    prescriptions: List[PrescriptionResponse]
