"""Tests for AuditRecorder and the audit_entry sequence."""

from uuid import uuid4

import pytest

from settlement_kernel.exceptions import ValidationError
from settlement_kernel.models.audit_entry import AuditAction, AuditEntityType
from settlement_kernel.services.audit_recorder import AuditRecorder
from settlement_kernel.services.sequence_service import SequenceService


def _append(recorder, business_id, action=AuditAction.CREATE, description="x"):
    return recorder.append(
        business_id=business_id,
        entity_type=AuditEntityType.PARTNER,
        entity_id=uuid4(),
        action=action,
        description=description,
        actor="auditor",
    )


class TestAppend:
    def test_append_returns_entry(self, audit_recorder, business_id, deterministic_clock):
        entity_id = uuid4()
        entry = audit_recorder.append(
            business_id=business_id,
            entity_type=AuditEntityType.PAYMENT,
            entity_id=entity_id,
            action=AuditAction.PAYMENT,
            description="Recorded payment",
            actor="auditor",
            new_value={"amount": "10"},
        )

        assert entry.seq == 1
        assert entry.entity_type == AuditEntityType.PAYMENT
        assert entry.entity_id == entity_id
        assert entry.action == AuditAction.PAYMENT
        assert entry.performed_by == "auditor"
        assert entry.performed_at == deterministic_clock.now()
        assert entry.new_value == {"amount": "10"}
        assert entry.previous_value is None

    def test_seq_is_monotonic(self, audit_recorder, business_id):
        seqs = [_append(audit_recorder, business_id).seq for _ in range(5)]
        assert seqs == [1, 2, 3, 4, 5]

    def test_accepts_string_enums(self, audit_recorder, business_id):
        entry = audit_recorder.append(
            business_id=business_id,
            entity_type="calculation",
            entity_id=uuid4(),
            action="calculate",
            description="",
            actor="a",
        )
        assert entry.entity_type == AuditEntityType.CALCULATION
        assert entry.action == AuditAction.CALCULATE


class TestList:
    def test_most_recent_first(self, audit_recorder, business_id):
        for i in range(3):
            _append(audit_recorder, business_id, description=f"entry {i}")

        entries = audit_recorder.list(business_id, 10)
        assert [e.description for e in entries] == ["entry 2", "entry 1", "entry 0"]

    def test_limit_applied(self, audit_recorder, business_id):
        for _ in range(5):
            _append(audit_recorder, business_id)
        assert len(audit_recorder.list(business_id, 2)) == 2

    def test_default_limit(self, session, deterministic_clock, business_id):
        recorder = AuditRecorder(session, deterministic_clock, default_limit=3, max_limit=10)
        for _ in range(5):
            _append(recorder, business_id)
        assert len(recorder.list(business_id)) == 3

    def test_limit_capped_by_max(self, session, deterministic_clock, business_id):
        recorder = AuditRecorder(session, deterministic_clock, default_limit=2, max_limit=4)
        for _ in range(6):
            _append(recorder, business_id)
        assert len(recorder.list(business_id, 1000)) == 4

    @pytest.mark.parametrize("limit", [0, -1, "10", True])
    def test_invalid_limit(self, audit_recorder, business_id, limit):
        with pytest.raises(ValidationError) as exc_info:
            audit_recorder.list(business_id, limit)
        assert exc_info.value.field == "limit"

    def test_scoped_by_business(self, audit_recorder, business_id):
        _append(audit_recorder, business_id)
        _append(audit_recorder, "someone-else")
        assert len(audit_recorder.list(business_id, 10)) == 1


class TestSequenceService:
    def test_first_value_is_one(self, session):
        service = SequenceService(session)
        assert service.current_value("fresh") is None
        assert service.next_value("fresh") == 1
        assert service.current_value("fresh") == 1

    def test_sequences_are_independent(self, session):
        service = SequenceService(session)
        service.next_value("a")
        service.next_value("a")
        assert service.next_value("b") == 1
        assert service.next_value("a") == 3

    def test_value_survives_commit(self, session, session_factory):
        SequenceService(session).next_value(SequenceService.AUDIT_ENTRY)
        session.commit()

        other = session_factory()
        try:
            assert SequenceService(other).next_value(SequenceService.AUDIT_ENTRY) == 2
        finally:
            other.close()
