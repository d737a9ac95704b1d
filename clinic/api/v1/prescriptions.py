from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...core.database import get_db, get_prescription_store
from ...core.documents import PrescriptionStore
from ...api.deps import get_doctor, get_doctor_id, raise_for_result
from ...services.prescription_service import PrescriptionService
from ...schemas.prescription import PrescriptionCreate, PrescriptionList

router = APIRouter(prefix="/prescriptions", tags=["Prescriptions"])

@router.post("", status_code=status.HTTP_201_CREATED)
async def save_prescription(
    prescription: PrescriptionCreate,
    doctor_id: int = Depends(get_doctor_id),
    db: Session = Depends(get_db),
    store: PrescriptionStore = Depends(get_prescription_store)
):
    """Record a prescription and mark its appointment completed (doctor only)."""
    result = raise_for_result(PrescriptionService(db, store).save(doctor_id, prescription))
    return {"message": "Prescription saved.", "id": result.value}

@router.get("/{appointment_id}", response_model=PrescriptionList, dependencies=[Depends(get_doctor)])
async def get_prescription(
    appointment_id: int,
    db: Session = Depends(get_db),
    store: PrescriptionStore = Depends(get_prescription_store)
):
    """Prescriptions recorded for an appointment (doctor only)."""
    result = raise_for_result(PrescriptionService(db, store).get_by_appointment_id(appointment_id))
    return {"prescriptions": result.value}
