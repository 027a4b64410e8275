from __future__ import annotations

import pytest
from pydantic import ValidationError

from core.domain.language import Language, translate
from core.domain.models import Action, BookPayload, BookRecord, FormDraft, Role, Session


def test_book_record_accepts_both_timestamp_spellings():
    snake = BookRecord.model_validate({"id": 1, "title": "Dune", "author": "Herbert", "created_at": "2024-05-01T10:00:00Z"})
    camel = BookRecord.model_validate({"id": 1, "title": "Dune", "author": "Herbert", "createdAt": "2024-05-01T10:00:00Z"})

    assert snake.created_at == camel.created_at
    assert snake.created_at.year == 2024


def test_legacy_book_record_without_timestamp():
    record = BookRecord.model_validate({"id": "abc", "title": "Dune", "author": "Herbert", "extra": 1})

    assert record.created_at is None
    assert record.id == "abc"


def test_payload_strips_and_rejects_blank_fields():
    assert BookPayload(title="  Dune ", author="Herbert").title == "Dune"
    with pytest.raises(ValidationError):
        BookPayload(title="   ", author="Herbert")


def test_form_draft_modes():
    draft = FormDraft()
    assert not draft.is_editing

    draft.load(BookRecord(id=7, title="Dune", author="Herbert"))
    assert draft.is_editing
    assert (draft.title, draft.author, draft.editing_target_id) == ("Dune", "Herbert", 7)

    draft.clear()
    assert draft == FormDraft()


def test_only_writes_are_mutations():
    assert {a for a in Action if a.is_mutation} == {Action.CREATE, Action.UPDATE, Action.DELETE}


def test_session_requires_token_and_role():
    with pytest.raises(ValidationError):
        Session(token="", role="admin")
    with pytest.raises(ValidationError):
        Session(token="abc", role="owner")


def test_session_repr_hides_token():
    session = Session(token="super-secret", role=Role.ADMIN)

    assert "super-secret" not in repr(session)
    assert "super-secret" not in str(session)


def test_translate_formats_and_falls_back_to_key():
    assert translate("login.welcome", Language.ENGLISH, role="admin") == "Welcome! Signed in as admin"
    assert translate("login.failed", Language.SPANISH) == "Usuario o contraseña incorrectos"
    assert translate("does.not.exist", Language.SPANISH) == "does.not.exist"
