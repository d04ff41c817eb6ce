"""Tests for CompanyTagService."""

from unittest.mock import Mock

import pytest

from auth.exceptions import ForbiddenError
from core.audit import AuditLogger
from core.exceptions import NotFoundError, ValidationFailedError
from core.models import CompanyTagCreate, CompanyTagUpdate
from core.services.company_tag_service import CompanyTagService
from factories import company_tag_row

TAG_ID = company_tag_row()["id"]


@pytest.fixture
def audit():
    return Mock(spec=AuditLogger)


@pytest.fixture
def service(mock_db, audit):
    return CompanyTagService(mock_db, audit)


class TestEnsureAssignable:

    def test_none_is_always_assignable(self, service, mock_db):
        assert service.ensure_assignable(None) is None
        mock_db.execute_single.assert_not_called()

    def test_active_tag(self, service, mock_db):
        mock_db.execute_single.return_value = company_tag_row()

        assert service.ensure_assignable("acme") == "acme"

    def test_unknown_tag(self, service, mock_db):
        mock_db.execute_single.return_value = None

        with pytest.raises(ValidationFailedError, match="Unknown company tag"):
            service.ensure_assignable("nope")

    def test_inactive_tag(self, service, mock_db):
        mock_db.execute_single.return_value = company_tag_row(is_active=False)

        with pytest.raises(ValidationFailedError):
            service.ensure_assignable("acme")


class TestCreate:

    def test_creates_and_audits(self, service, mock_db, audit, super_admin):
        mock_db.execute_single.return_value = None
        mock_db.execute_returning.return_value = [company_tag_row()]

        tag = service.create(super_admin, CompanyTagCreate(name="acme", description="Acme Aviation"))

        assert tag.name == "acme"
        assert mock_db.execute_returning.call_args.args[1] == ("acme", "Acme Aviation", True)
        audit.record_created.assert_called_once_with(super_admin.id, "company_tag", tag)

    def test_duplicate_name(self, service, mock_db, super_admin):
        mock_db.execute_single.return_value = company_tag_row()

        with pytest.raises(ValidationFailedError, match="already exists"):
            service.create(super_admin, CompanyTagCreate(name="acme"))

    def test_requires_super_admin(self, service, acme_admin):
        with pytest.raises(ForbiddenError):
            service.create(acme_admin, CompanyTagCreate(name="acme"))


class TestUpdate:

    def test_unknown_tag(self, service, mock_db, super_admin):
        mock_db.execute_single.return_value = None

        with pytest.raises(NotFoundError):
            service.update(super_admin, TAG_ID, CompanyTagUpdate(name="new"))

    def test_empty_update_is_noop(self, service, mock_db, audit, super_admin):
        mock_db.execute_single.return_value = company_tag_row()

        tag = service.update(super_admin, TAG_ID, CompanyTagUpdate())

        assert tag.name == "acme"
        mock_db.execute_returning.assert_not_called()
        audit.record_updated.assert_not_called()

    def test_explicit_null_name_ignored(self, service, mock_db, super_admin):
        mock_db.execute_single.return_value = company_tag_row()

        service.update(super_admin, TAG_ID, CompanyTagUpdate(name=None))

        mock_db.execute_returning.assert_not_called()

    def test_description_can_be_cleared(self, service, mock_db, audit, super_admin):
        mock_db.execute_single.return_value = company_tag_row()
        mock_db.execute_returning.return_value = [company_tag_row(description=None)]

        tag = service.update(super_admin, TAG_ID, CompanyTagUpdate(description=None))

        assert tag.description is None
        assert "description = %s" in mock_db.execute_returning.call_args.args[0]
        actor_id, entity_type, before, after = audit.record_updated.call_args.args
        assert (actor_id, entity_type) == (super_admin.id, "company_tag")
        assert before.description == "Acme Aviation"
        assert after.description is None

    def test_rename_onto_existing_name(self, service, mock_db, super_admin):
        mock_db.execute_single.side_effect = [
            company_tag_row(),
            company_tag_row(name="other"),
        ]

        with pytest.raises(ValidationFailedError):
            service.update(super_admin, TAG_ID, CompanyTagUpdate(name="other"))


class TestDeactivate:

    def test_soft_delete(self, service, mock_db, audit, super_admin):
        mock_db.execute_single.return_value = company_tag_row()

        service.deactivate(super_admin, TAG_ID)

        assert "is_active = false" in mock_db.execute_returning.call_args.args[0]
        audit.record_deleted.assert_called_once()

    def test_unknown_tag(self, service, mock_db, super_admin):
        mock_db.execute_single.return_value = None

        with pytest.raises(NotFoundError):
            service.deactivate(super_admin, TAG_ID)
