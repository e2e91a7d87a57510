"""
Membership registry tests.

Verifies that:
- The project creator is the single owner
- Only owners and admins add or remove members
- The owner can never be removed, demoted, or duplicated
- Only the owner changes roles
"""

import pytest

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.core.permissions import Action
from app.models.member import ProjectRole
from app.services.membership_service import MembershipService


# ---------------------------------------------------------------------------
# Owner
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_creator_becomes_owner(db, project, owner):
    members = MembershipService(db)
    assert await members.get_role(project.id, owner.id) == ProjectRole.owner
    assert await members.is_owner(project.id, owner.id)


@pytest.mark.asyncio
async def test_add_owner_twice_is_rejected(db, project, owner):
    members = MembershipService(db)
    project_row = await members.get_project(project.id)
    with pytest.raises(ConflictError):
        await members.add_owner(project_row, owner)


# ---------------------------------------------------------------------------
# Add member
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_adds_member(db, project, admin, outsider):
    members = MembershipService(db)
    added = await members.add_member(project.id, outsider.email, ProjectRole.member, admin)

    assert added.user_id == outsider.id
    assert added.role == "member"
    assert await members.is_member(project.id, outsider.id)


@pytest.mark.asyncio
async def test_plain_member_cannot_add(db, project, member, outsider):
    with pytest.raises(ForbiddenError) as exc_info:
        await MembershipService(db).add_member(
            project.id, outsider.email, ProjectRole.member, member
        )
    assert exc_info.value.code == "INSUFFICIENT_ROLE"


@pytest.mark.asyncio
async def test_add_unknown_email(db, project, owner):
    with pytest.raises(NotFoundError) as exc_info:
        await MembershipService(db).add_member(
            project.id, "nobody@example.com", ProjectRole.member, owner
        )
    assert exc_info.value.code == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_add_existing_member_conflicts(db, project, owner, member):
    with pytest.raises(ConflictError) as exc_info:
        await MembershipService(db).add_member(project.id, member.email, ProjectRole.admin, owner)
    assert exc_info.value.code == "ALREADY_MEMBER"


@pytest.mark.asyncio
async def test_cannot_add_second_owner(db, project, owner, outsider):
    with pytest.raises(ConflictError) as exc_info:
        await MembershipService(db).add_member(project.id, outsider.email, ProjectRole.owner, owner)
    assert exc_info.value.code == "CANNOT_ADD_OWNER"


# ---------------------------------------------------------------------------
# Remove member
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_admin_removes_member(db, project, admin, member):
    members = MembershipService(db)
    await members.remove_member(project.id, member.id, admin)
    assert not await members.is_member(project.id, member.id)


@pytest.mark.asyncio
async def test_owner_cannot_be_removed(db, project, admin, owner):
    with pytest.raises(ConflictError) as exc_info:
        await MembershipService(db).remove_member(project.id, owner.id, admin)
    assert exc_info.value.code == "CANNOT_REMOVE_OWNER"


@pytest.mark.asyncio
async def test_remove_non_member(db, project, owner, outsider):
    with pytest.raises(NotFoundError) as exc_info:
        await MembershipService(db).remove_member(project.id, outsider.id, owner)
    assert exc_info.value.code == "MEMBER_NOT_FOUND"


@pytest.mark.asyncio
async def test_removed_member_loses_access(db, project, owner, member):
    members = MembershipService(db)
    await members.remove_member(project.id, member.id, owner)
    with pytest.raises(ForbiddenError):
        await members.authorize(project.id, member.id, Action.view_project)


# ---------------------------------------------------------------------------
# Roles
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_owner_promotes_member(db, project, owner, member):
    updated = await MembershipService(db).update_role(
        project.id, member.id, ProjectRole.admin, owner
    )
    assert updated.role == "admin"
    assert updated.email == member.email


@pytest.mark.asyncio
async def test_admin_cannot_change_roles(db, project, admin, member):
    with pytest.raises(ForbiddenError):
        await MembershipService(db).update_role(project.id, member.id, ProjectRole.admin, admin)


@pytest.mark.asyncio
async def test_owner_role_is_fixed(db, project, owner):
    with pytest.raises(ConflictError) as exc_info:
        await MembershipService(db).update_role(project.id, owner.id, ProjectRole.member, owner)
    assert exc_info.value.code == "CANNOT_CHANGE_OWNER"


@pytest.mark.asyncio
async def test_cannot_promote_to_owner(db, project, owner, admin):
    with pytest.raises(ConflictError) as exc_info:
        await MembershipService(db).update_role(project.id, admin.id, ProjectRole.owner, owner)
    assert exc_info.value.code == "CANNOT_ASSIGN_OWNER"


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_list_members(db, project, owner, admin, member):
    listing = await MembershipService(db).list_members(project.id, member)
    assert listing.total == 3
    roles = {m.user_id: m.role for m in listing.members}
    assert roles == {owner.id: "owner", admin.id: "admin", member.id: "member"}


@pytest.mark.asyncio
async def test_outsider_cannot_list_members(db, project, outsider):
    with pytest.raises(ForbiddenError) as exc_info:
        await MembershipService(db).list_members(project.id, outsider)
    assert exc_info.value.code == "NOT_A_MEMBER"


@pytest.mark.asyncio
async def test_authorize_unknown_project(db, owner):
    import uuid

    with pytest.raises(NotFoundError) as exc_info:
        await MembershipService(db).authorize(uuid.uuid4(), owner.id, Action.view_project)
    assert exc_info.value.code == "PROJECT_NOT_FOUND"
