"""Application tests for proof capture commands."""

import base64
import json

import pytest
from protean import current_domain

from fleetops.order.creation import CreateOrder
from fleetops.order.errors import ProofValidationFailed, SubjectNotResolved
from fleetops.order.order import Order
from fleetops.proof.capture import CaptureQrScan, CaptureSignature
from fleetops.proof.proof import Proof


def _create_order():
    order_id = current_domain.process(
        CreateOrder(
            company_id="company-001",
            waypoints=json.dumps([{"name": "Stop 1"}, {"name": "Stop 2"}]),
        ),
        asynchronous=False,
    )
    return current_domain.repository_for(Order).get(order_id)


def _proof_count():
    return current_domain.repository_for(Proof)._dao.query.all().total


class TestCaptureQrScan:
    def test_matching_scan_persists_one_proof(self):
        order = _create_order()
        waypoint = order.ordered_waypoints()[0]

        proof_id = current_domain.process(
            CaptureQrScan(
                order_id=str(order.id),
                company_id="company-001",
                subject=waypoint.public_id,
                code=str(waypoint.id),
                data=json.dumps({"scanner": "front"}),
            ),
            asynchronous=False,
        )

        proof = current_domain.repository_for(Proof).get(proof_id)
        assert proof.subject_type == "waypoint"
        assert proof.subject_id == str(waypoint.id)
        assert json.loads(proof.data) == {"scanner": "front"}
        assert _proof_count() == 1

    def test_mismatched_scan_persists_nothing(self):
        order = _create_order()
        waypoint = order.ordered_waypoints()[0]

        with pytest.raises(ProofValidationFailed):
            current_domain.process(
                CaptureQrScan(order_id=str(order.id), subject=waypoint.public_id, code="somebody-else"),
                asynchronous=False,
            )

        assert _proof_count() == 0

    def test_unresolved_subject(self):
        order = _create_order()

        with pytest.raises(SubjectNotResolved):
            current_domain.process(
                CaptureQrScan(order_id=str(order.id), subject="entity_missing", code=str(order.id)),
                asynchronous=False,
            )


class TestCaptureSignature:
    def test_signature_proof_links_stored_file(self):
        order = _create_order()

        proof_id = current_domain.process(
            CaptureSignature(
                order_id=order.public_id,
                signature=base64.b64encode(b"signature-png").decode(),
            ),
            asynchronous=False,
        )

        proof = current_domain.repository_for(Proof).get(proof_id)
        assert proof.order_id == str(order.id)
        assert proof.file_path.startswith("uploads/company-001/signatures/proof_")
        assert proof.remarks == "Verified by Signature"
