"""
Invitation workflow tests.

Verifies that:
- Invitations move pending -> accepted | declined | cancelled exactly once
- Only the invitee decides; only owners and admins invite and cancel
- At most one pending invitation exists per (project, invitee)
- Invite codes are regenerated on collision and replace the previous code
"""

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.models.member import ProjectRole
from app.schemas.project import ProjectCreateRequest
from app.services import invitation_service
from app.services.invitation_service import InvitationService
from app.services.membership_service import MembershipService
from app.services.project_service import ProjectService


# ---------------------------------------------------------------------------
# Invite
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_invite_creates_pending_and_queues_email(db, project, owner, outsider, queued_emails):
    invitation = await InvitationService(db).invite(
        project.id, outsider.email, ProjectRole.admin, owner
    )

    assert invitation.status == "pending"
    assert invitation.role == "admin"
    assert invitation.invitee_id == outsider.id
    assert invitation.project_title == "Website Relaunch"
    assert queued_emails == [
        {
            "to_email": outsider.email,
            "project_title": "Website Relaunch",
            "inviter_name": owner.display_name,
            "role": "admin",
        }
    ]


@pytest.mark.asyncio
async def test_member_cannot_invite(db, project, member, outsider, queued_emails):
    with pytest.raises(ForbiddenError):
        await InvitationService(db).invite(project.id, outsider.email, ProjectRole.member, member)
    assert queued_emails == []


@pytest.mark.asyncio
async def test_invite_existing_member(db, project, owner, member):
    with pytest.raises(ConflictError) as exc_info:
        await InvitationService(db).invite(project.id, member.email, ProjectRole.member, owner)
    assert exc_info.value.code == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_second_pending_invitation_conflicts(db, project, owner, admin, outsider):
    service = InvitationService(db)
    await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    with pytest.raises(ConflictError) as exc_info:
        await service.invite(project.id, outsider.email, ProjectRole.admin, admin)
    assert exc_info.value.code == "INVITE_EXISTS"


@pytest.mark.asyncio
async def test_cannot_invite_as_owner(db, project, owner, outsider):
    with pytest.raises(ConflictError) as exc_info:
        await InvitationService(db).invite(project.id, outsider.email, ProjectRole.owner, owner)
    assert exc_info.value.code == "CANNOT_INVITE_OWNER"


@pytest.mark.asyncio
async def test_reinvite_after_decline(db, project, owner, outsider):
    service = InvitationService(db)
    first = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    await service.decline(first.id, outsider)

    second = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    assert second.id != first.id
    assert second.status == "pending"


# ---------------------------------------------------------------------------
# Accept / decline / cancel
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_accept_adds_member_with_invited_role(db, project, owner, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.admin, owner)

    joined = await service.accept(invitation.id, outsider)

    assert joined.user_id == outsider.id
    assert joined.role == "admin"
    assert await MembershipService(db).get_role(project.id, outsider.id) == ProjectRole.admin


@pytest.mark.asyncio
async def test_only_invitee_accepts(db, project, owner, member, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)

    with pytest.raises(ForbiddenError) as exc_info:
        await service.accept(invitation.id, member)
    assert exc_info.value.code == "NOT_INVITEE"


@pytest.mark.asyncio
async def test_accept_twice_conflicts(db, project, owner, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    await service.accept(invitation.id, outsider)

    with pytest.raises(ConflictError) as exc_info:
        await service.accept(invitation.id, outsider)
    assert exc_info.value.code == "INVITE_NOT_PENDING"


@pytest.mark.asyncio
async def test_decline_then_accept_conflicts(db, project, owner, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    declined = await service.decline(invitation.id, outsider)
    assert declined.status == "declined"
    assert declined.responded_at is not None

    with pytest.raises(ConflictError):
        await service.accept(invitation.id, outsider)
    assert not await MembershipService(db).is_member(project.id, outsider.id)


@pytest.mark.asyncio
async def test_cancel_by_admin(db, project, owner, admin, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)

    cancelled = await service.cancel(invitation.id, project.id, admin)
    assert cancelled.status == "cancelled"

    with pytest.raises(ConflictError):
        await service.accept(invitation.id, outsider)


@pytest.mark.asyncio
async def test_cancel_by_member_is_forbidden(db, project, owner, member, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    with pytest.raises(ForbiddenError):
        await service.cancel(invitation.id, project.id, member)


@pytest.mark.asyncio
async def test_cancel_twice_conflicts(db, project, owner, admin, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)
    await service.cancel(invitation.id, project.id, owner)

    with pytest.raises(ConflictError) as exc_info:
        await service.cancel(invitation.id, project.id, admin)
    assert exc_info.value.code == "INVITE_NOT_PENDING"


@pytest.mark.asyncio
async def test_cancel_through_other_project_is_not_found(db, project, owner, outsider):
    side = await ProjectService(db).create_project(ProjectCreateRequest(title="Side project"), owner)
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)

    with pytest.raises(NotFoundError) as exc_info:
        await service.cancel(invitation.id, side.id, owner)
    assert exc_info.value.code == "INVITE_NOT_FOUND"

    listed = await service.list_for_project(project.id, owner)
    assert [(i.id, i.status) for i in listed.invitations] == [(invitation.id, "pending")]


@pytest.mark.asyncio
async def test_unknown_invitation(db, outsider):
    import uuid

    with pytest.raises(NotFoundError):
        await InvitationService(db).decline(uuid.uuid4(), outsider)


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_pending_list_excludes_answered(db, project, owner, outsider):
    service = InvitationService(db)
    invitation = await service.invite(project.id, outsider.email, ProjectRole.member, owner)

    pending = await service.list_pending_for_user(outsider)
    assert [i.id for i in pending.invitations] == [invitation.id]

    await service.decline(invitation.id, outsider)
    assert (await service.list_pending_for_user(outsider)).total == 0
    assert (await service.list_for_project(project.id, owner)).total == 1


# ---------------------------------------------------------------------------
# Invite codes
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_invite_code_join(db, project, owner, outsider):
    service = InvitationService(db)
    generated = await service.generate_invite_code(project.id, owner)

    assert len(generated.invite_code) == 8
    assert generated.invite_code.isalnum()
    assert generated.invite_code == generated.invite_code.upper()

    joined = await service.join_by_code(generated.invite_code, outsider)
    assert joined.role == "member"
    assert joined.project_id == project.id


@pytest.mark.asyncio
async def test_regenerated_code_replaces_old(db, project, owner, outsider):
    service = InvitationService(db)
    old = await service.generate_invite_code(project.id, owner)
    new = await service.generate_invite_code(project.id, owner)
    assert new.invite_code != old.invite_code

    with pytest.raises(NotFoundError) as exc_info:
        await service.join_by_code(old.invite_code, outsider)
    assert exc_info.value.code == "INVALID_INVITE_CODE"


@pytest.mark.asyncio
async def test_join_twice_conflicts(db, project, owner, member):
    service = InvitationService(db)
    generated = await service.generate_invite_code(project.id, owner)
    with pytest.raises(ConflictError) as exc_info:
        await service.join_by_code(generated.invite_code, member)
    assert exc_info.value.code == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_member_cannot_generate_code(db, project, member):
    with pytest.raises(ForbiddenError):
        await InvitationService(db).generate_invite_code(project.id, member)


@pytest.mark.asyncio
async def test_code_collision_is_retried(db, project, owner, make_user, monkeypatch):
    other_owner = await make_user("other")
    other = await ProjectService(db).create_project(ProjectCreateRequest(title="Other"), other_owner)

    codes = iter(["TAKEN123", "TAKEN123", "FRESH456"])
    monkeypatch.setattr(invitation_service, "generate_invite_code", lambda length=None: next(codes))

    service = InvitationService(db)
    assert (await service.generate_invite_code(other.id, other_owner)).invite_code == "TAKEN123"
    assert (await service.generate_invite_code(project.id, owner)).invite_code == "FRESH456"


@pytest.mark.asyncio
async def test_code_generation_gives_up(db, project, owner, make_user, monkeypatch):
    other_owner = await make_user("other")
    other = await ProjectService(db).create_project(ProjectCreateRequest(title="Other"), other_owner)

    monkeypatch.setattr(invitation_service, "generate_invite_code", lambda length=None: "SAMECODE")
    service = InvitationService(db)
    await service.generate_invite_code(other.id, other_owner)

    with pytest.raises(ConflictError) as exc_info:
        await service.generate_invite_code(project.id, owner)
    assert exc_info.value.code == "INVITE_CODE_EXHAUSTED"
