import itertools

import pytest

from app import models
from app.core.exceptions import InviteCodeGenerationFailed
from app.services import project_service
from app.services.invite import INVITE_ALPHABET, generate_invite_code


def test_generated_codes_use_unambiguous_alphabet():
    codes = {generate_invite_code() for _ in range(200)}
    assert all(len(code) == 8 for code in codes)
    assert all(set(code) <= set(INVITE_ALPHABET) for code in codes)
    assert not set("IO01") & set(INVITE_ALPHABET)
    assert len(codes) > 190


def test_collision_is_retried_with_a_fresh_code(db):
    project_service.create_project(db, "First", "Ana", code_factory=lambda: "AAAAAAAA")

    codes = iter(["AAAAAAAA", "AAAAAAAA", "BBBBBBBB"])
    project, member = project_service.create_project(db, "Second", "Bo", code_factory=lambda: next(codes))

    assert project.invite_code == "BBBBBBBB"
    assert db.query(models.Project).count() == 2
    assert db.get(models.ProjectMember, (project.id, member.id)).role == "OWNER"


def test_gives_up_after_configured_attempts(db):
    project_service.create_project(db, "First", "Ana", code_factory=lambda: "AAAAAAAA")
    calls = itertools.count()

    def same_code() -> str:
        next(calls)
        return "AAAAAAAA"

    with pytest.raises(InviteCodeGenerationFailed) as exc_info:
        project_service.create_project(db, "Second", "Bo", code_factory=same_code, attempts=3)

    assert next(calls) == 3
    assert exc_info.value.status_code == 500
    # the creator row from the failed attempt is not left behind
    assert db.query(models.Member).count() == 1
    assert db.query(models.Project).count() == 1
