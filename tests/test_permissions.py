"""Permission rules evaluated on unsaved snapshots, no database involved."""
import pytest

from app.core import permissions
from app.core.exceptions import (
    AccessDenied,
    AlreadyMember,
    CannotRemoveOwner,
    InvalidAssignee,
    UnauthorizedFields,
    ValidationFailed,
)
from app.models import Project, ProjectMember, Task

PRINCIPALS = ["owner", "mgr", "mem", "stranger"]


@pytest.fixture
def project():
    return Project(
        id=1,
        name="Launch",
        owner_id="owner",
        members=[
            ProjectMember(project_id=1, user_id="mgr", role="Manager"),
            ProjectMember(project_id=1, user_id="mem", role="Member"),
        ],
    )


@pytest.fixture
def task():
    return Task(id=7, project_id=1, title="Write docs", reporter_id="mem", assignee_id=None)


def test_role_predicates(project):
    assert permissions.is_owner(project, "owner")
    assert permissions.is_manager(project, "owner")
    assert permissions.is_manager(project, "mgr")
    assert not permissions.is_manager(project, "mem")
    assert permissions.is_member(project, "mem")
    assert not permissions.is_member(project, "stranger")


@pytest.mark.parametrize("user_id", PRINCIPALS)
def test_role_hierarchy(project, user_id):
    if permissions.is_owner(project, user_id):
        assert permissions.is_manager(project, user_id)
    if permissions.is_manager(project, user_id):
        assert permissions.is_member(project, user_id)


def test_owner_is_manager_without_member_entry():
    project = Project(id=2, name="Solo", owner_id="owner")
    assert project.members == []
    assert permissions.is_manager(project, "owner")


@pytest.mark.parametrize("caller", PRINCIPALS)
def test_owner_can_never_be_removed(project, caller):
    with pytest.raises(CannotRemoveOwner):
        permissions.authorize_remove_member(project, caller, "owner")


def test_remove_member_requires_manager(project):
    permissions.authorize_remove_member(project, "mgr", "mem")
    with pytest.raises(AccessDenied) as exc:
        permissions.authorize_remove_member(project, "mem", "mgr")
    assert exc.value.reason == "not_manager"


def test_add_member_rules(project):
    assert permissions.authorize_add_member(project, "mgr", "newcomer") == "Member"
    assert permissions.authorize_add_member(project, "owner", "newcomer", "Manager") == "Manager"
    with pytest.raises(AlreadyMember):
        permissions.authorize_add_member(project, "owner", "mem")
    with pytest.raises(AlreadyMember):
        permissions.authorize_add_member(project, "mgr", "owner")
    with pytest.raises(AccessDenied):
        permissions.authorize_add_member(project, "mem", "newcomer")
    with pytest.raises(ValidationFailed):
        permissions.authorize_add_member(project, "owner", "newcomer", "Admin")


def test_project_update_fields_checked_before_role():
    with pytest.raises(ValidationFailed) as exc:
        permissions.validate_project_update({"name": "New", "owner_id": "stranger"})
    assert exc.value.context["fields"] == ["owner_id"]


def test_project_update_values():
    changes = permissions.validate_project_update({"status": "On Hold", "end_date": "2031-05-01"})
    assert changes["status"] == "On Hold"
    assert str(changes["end_date"]) == "2031-05-01"
    with pytest.raises(ValidationFailed):
        permissions.validate_project_update({"status": "Archived"})
    with pytest.raises(ValidationFailed):
        permissions.validate_project_update({"end_date": None})


def test_project_create_requires_end_date():
    with pytest.raises(ValidationFailed) as exc:
        permissions.validate_project_create({"name": "No deadline"})
    assert exc.value.context["field"] == "end_date"


def test_task_create_by_member(project):
    data = permissions.authorize_task_create(project, "mem", {"title": "Plan", "assignee_id": "mem"})
    assert data["reporter_id"] == "mem"
    assert data["status"] == "To-Do"
    assert data["assignee_id"] == "mem"


def test_task_create_rules(project):
    with pytest.raises(AccessDenied):
        permissions.authorize_task_create(project, "stranger", {"title": "Plan"})
    with pytest.raises(InvalidAssignee):
        permissions.authorize_task_create(project, "mem", {"title": "Plan", "assignee_id": "stranger"})
    with pytest.raises(ValidationFailed):
        permissions.authorize_task_create(project, "mem", {"title": "  "})
    with pytest.raises(ValidationFailed):
        permissions.authorize_task_create(project, "mem", {"title": "Plan", "estimated_hours": -1})


def test_non_manager_limited_fields(project, task):
    with pytest.raises(UnauthorizedFields) as exc:
        permissions.authorize_task_update(project, task, "mem", {"priority": "High"})
    assert isinstance(exc.value, ValidationFailed)
    assert exc.value.unauthorized_fields == ["priority"]
    assert exc.value.context["allowed_fields"] == ["actual_hours", "description", "status"]

    changes = permissions.authorize_task_update(project, task, "mem", {"status": "In Progress"})
    assert changes == {"status": "In Progress"}


def test_task_status_domain(project, task):
    with pytest.raises(ValidationFailed) as exc:
        permissions.authorize_task_update(project, task, "mgr", {"status": "Completed"})
    assert exc.value.context["allowed_values"] == ["To-Do", "In Progress", "Review", "Done"]


def test_manager_assignee_rules(project, task):
    with pytest.raises(InvalidAssignee):
        permissions.authorize_task_update(project, task, "mgr", {"assignee_id": "stranger"})
    assert permissions.authorize_task_update(project, task, "mgr", {"assignee_id": ""}) == {"assignee_id": None}
    assert permissions.authorize_task_update(project, task, "mgr", {"assignee_id": "owner"}) == {"assignee_id": "owner"}


def test_manager_cannot_touch_immutable_fields(project, task):
    with pytest.raises(ValidationFailed) as exc:
        permissions.authorize_task_update(project, task, "owner", {"reporter_id": "mgr"})
    assert not isinstance(exc.value, UnauthorizedFields)


def test_update_denied_for_unrelated_user(project, task):
    with pytest.raises(AccessDenied) as exc:
        permissions.authorize_task_update(project, task, "stranger", {"status": "Done"})
    assert exc.value.reason == "not_assignee_reporter_or_manager"


@pytest.mark.parametrize("user_id", ["owner", "mgr", "stranger"])
def test_only_reporter_deletes(task, user_id):
    permissions.authorize_task_delete(task, "mem")
    with pytest.raises(AccessDenied) as exc:
        permissions.authorize_task_delete(task, user_id)
    assert exc.value.reason == "not_reporter"


def test_task_read_is_assignee_or_reporter(task):
    task.assignee_id = "mgr"
    permissions.authorize_task_read(task, "mem")
    permissions.authorize_task_read(task, "mgr")
    with pytest.raises(AccessDenied):
        permissions.authorize_task_read(task, "owner")


def test_project_read_through_task(project):
    permissions.authorize_project_read(project, "stranger", has_task_in_project=True)
    with pytest.raises(AccessDenied):
        permissions.authorize_project_read(project, "stranger", has_task_in_project=False)


@pytest.mark.parametrize("hours", [float("nan"), float("inf"), float("-inf")])
def test_hours_must_be_finite(project, task, hours):
    with pytest.raises(ValidationFailed) as exc:
        permissions.authorize_task_update(project, task, "mem", {"actual_hours": hours})
    assert exc.value.context["field"] == "actual_hours"
    with pytest.raises(ValidationFailed):
        permissions.authorize_task_create(project, "mem", {"title": "Plan", "estimated_hours": hours})


def test_dates_parse_whole_value():
    changes = permissions.validate_project_update({"end_date": "2031-05-01T09:30:00"})
    assert str(changes["end_date"]) == "2031-05-01"
    for bad in ("2031-05-01 garbage text", "2031-05-01x", "tomorrow"):
        with pytest.raises(ValidationFailed):
            permissions.validate_project_update({"end_date": bad})
