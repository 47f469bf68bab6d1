"""Proof capture — QR scans and signatures against an order subject.

The subject is named by its public id. Without one the proof is about the
order itself; ``place_`` and ``waypoint_`` ids name a stop of a multi-drop
order, ``entity_`` ids a line item.
"""

import base64
import binascii
import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from fleetops.adapters import get_file_store
from fleetops.domain import fleetops
from fleetops.order.errors import ProofValidationFailed, SubjectNotResolved
from fleetops.order.loading import get_order
from fleetops.order.order import SubjectType
from fleetops.proof.proof import Proof, ProofMethod

logger = structlog.get_logger(__name__)

QR_REMARKS = "Verified by QR Code Scan"
SIGNATURE_REMARKS = "Verified by Signature"


class ProofCaptureService:
    def resolve_subject(self, order, subject_ref: str | None):
        """Return ``(SubjectType, subject)`` for a public subject reference."""
        if not subject_ref:
            return SubjectType.ORDER, order

        subject = None
        subject_type = None
        if subject_ref.startswith(("place_", "waypoint_")):
            subject_type, subject = SubjectType.WAYPOINT, order.find_waypoint(subject_ref)
        elif subject_ref.startswith("entity_"):
            subject_type, subject = SubjectType.ENTITY, order.find_item(subject_ref)

        if subject is None:
            raise SubjectNotResolved(f"Unable to resolve proof subject {subject_ref}.")
        return subject_type, subject

    def capture_qr(self, order, subject_ref: str | None, code: str | None, raw_data=None, data=None) -> Proof:
        if not code:
            raise ValidationError({"code": ["No QR code data to capture."]})

        subject_type, subject = self.resolve_subject(order, subject_ref)
        if code != str(subject.id):
            logger.warning(
                "QR code does not match subject",
                order_id=str(order.id),
                subject_type=subject_type.value,
                subject_ref=subject_ref,
            )
            raise ProofValidationFailed()

        return Proof.capture(
            order,
            ProofMethod.QR_CODE,
            subject_type.value,
            str(subject.id),
            remarks=QR_REMARKS,
            raw_data=raw_data or code,
            data=data,
        )

    def capture_signature(self, order, subject_ref: str | None, signature: str, remarks=None, data=None) -> Proof:
        subject_type, subject = self.resolve_subject(order, subject_ref)
        image = self.decode_signature(signature)

        proof = Proof.capture(
            order,
            ProofMethod.SIGNATURE,
            subject_type.value,
            str(subject.id),
            remarks=remarks or SIGNATURE_REMARKS,
            data=data,
        )

        path = f"uploads/{order.company_id or 'default'}/signatures/{proof.public_id}.png"
        stored = get_file_store().put(path, image, "image/png")
        proof.link_file(stored["file_id"], stored["path"])
        return proof

    @staticmethod
    def decode_signature(signature: str | None) -> bytes:
        if not signature:
            raise ValidationError({"signature": ["No signature data to capture."]})
        if signature.startswith("data:") and "," in signature:
            signature = signature.split(",", 1)[1]
        try:
            return base64.b64decode(signature, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValidationError({"signature": ["Signature is not valid base64 image data."]}) from exc


def _json(value):
    return json.loads(value) if isinstance(value, str) and value else value


@fleetops.command(part_of="Proof")
class CaptureQrScan:
    order_id = Identifier(required=True)
    company_id = Identifier()
    subject = String(max_length=50)
    code = String(max_length=255)
    raw_data = Text()
    data = Text()  # JSON


@fleetops.command(part_of="Proof")
class CaptureSignature:
    order_id = Identifier(required=True)
    company_id = Identifier()
    subject = String(max_length=50)
    signature = Text(required=True)  # base64, optionally a data: URL
    remarks = String(max_length=500)
    data = Text()  # JSON


@fleetops.command_handler(part_of=Proof)
class ProofCaptureHandler:
    @handle(CaptureQrScan)
    def capture_qr_scan(self, command):
        order = get_order(command.order_id, command.company_id)
        proof = ProofCaptureService().capture_qr(
            order, command.subject, command.code, command.raw_data, _json(command.data)
        )
        current_domain.repository_for(Proof).add(proof)
        return str(proof.id)

    @handle(CaptureSignature)
    def capture_signature(self, command):
        order = get_order(command.order_id, command.company_id)
        proof = ProofCaptureService().capture_signature(
            order, command.subject, command.signature, command.remarks, _json(command.data)
        )
        current_domain.repository_for(Proof).add(proof)
        return str(proof.id)
