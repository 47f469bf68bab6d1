"""Proof of delivery aggregate.

A proof attests that a driver handled a subject of an order: the order
itself, one of its waypoints, or one of its line items. It is either a
scanned QR code (``raw_data`` holds the scanned value) or a signature
image kept in the file store. Proofs are never modified once captured.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Identifier, String, Text

from fleetops.domain import fleetops
from fleetops.order.order import new_public_id


class ProofMethod(Enum):
    QR_CODE = "qr_code"
    SIGNATURE = "signature"


@fleetops.event(part_of="Proof")
class ProofCaptured:
    """A proof was captured for an order subject."""

    __version__ = 1

    proof_id = Identifier(required=True)
    order_id = Identifier(required=True)
    method = String(required=True)
    subject_type = String(required=True)
    subject_id = Identifier(required=True)
    captured_at = DateTime(required=True)


@fleetops.aggregate
class Proof:
    public_id = String(required=True, max_length=50)
    company_id = Identifier()
    order_id = Identifier(required=True)
    method = String(required=True, max_length=20, choices=ProofMethod)
    subject_type = String(required=True, max_length=20)
    subject_id = Identifier(required=True)
    raw_data = Text()
    data = Text()  # JSON
    remarks = String(max_length=500)
    file_id = Identifier()
    file_path = String(max_length=500)
    created_at = DateTime()

    @classmethod
    def capture(
        cls,
        order,
        method: ProofMethod,
        subject_type: str,
        subject_id: str,
        remarks: str,
        raw_data: str | None = None,
        data: dict | None = None,
    ):
        now = datetime.now(UTC)
        proof = cls(
            public_id=new_public_id("proof"),
            company_id=order.company_id,
            order_id=str(order.id),
            method=method.value,
            subject_type=subject_type,
            subject_id=str(subject_id),
            raw_data=raw_data,
            data=json.dumps(data or {}),
            remarks=remarks,
            created_at=now,
        )
        proof.raise_(
            ProofCaptured(
                proof_id=str(proof.id),
                order_id=str(order.id),
                method=method.value,
                subject_type=subject_type,
                subject_id=str(subject_id),
                captured_at=now,
            )
        )
        return proof

    def link_file(self, file_id: str, file_path: str) -> None:
        self.file_id = file_id
        self.file_path = file_path
