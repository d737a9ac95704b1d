"""
Document store access for prescriptions.

Prescriptions are schemaless documents kept in a MongoDB collection and keyed
by the appointment they belong to. The relational store never references them.
"""
from typing import Any, Dict, List

from bson import ObjectId
from pymongo.collection import Collection


class PrescriptionStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    def save(self, prescription: Dict[str, Any]) -> str:
        """Append a prescription document and return its id."""
        result = self.collection.insert_one(dict(prescription))
        return str(result.inserted_id)

    def get_by_appointment_id(self, appointment_id: int) -> List[Dict[str, Any]]:
        """Return every prescription recorded for an appointment."""
        documents = []
        for document in self.collection.find({"appointment_id": appointment_id}):
            document["id"] = str(document.pop("_id"))
            documents.append(document)
        return documents

    def delete(self, prescription_id: str) -> None:
        self.collection.delete_one({"_id": ObjectId(prescription_id)})
