from enum import Enum
from typing import FrozenSet, Union

from fastapi import Depends, HTTPException

from tintix.deps.auth import CurrentUser, require_auth


class Role(str, Enum):
    MANAGER = "manager"
    INSTALLER = "installer"
    DATA_ENTRY = "data_entry"


class Capability(str, Enum):
    VIEW_DASHBOARD = "view_dashboard"
    VIEW_REPORTS = "view_reports"
    VIEW_TIME_REPORTS = "view_time_reports"
    VIEW_JOB_ENTRIES = "view_job_entries"
    VIEW_ALL_JOB_ENTRIES = "view_all_job_entries"
    CREATE_JOB_ENTRIES = "create_job_entries"
    EDIT_JOB_ENTRIES = "edit_job_entries"
    DELETE_JOB_ENTRIES = "delete_job_entries"
    VIEW_JOB_COSTS = "view_job_costs"
    VIEW_INVENTORY = "view_inventory"
    MANAGE_INVENTORY = "manage_inventory"
    MANAGE_FILMS = "manage_films"
    MANAGE_INSTALLERS = "manage_installers"
    MANAGE_USERS = "manage_users"


_ROLE_CAPABILITIES = {
    Role.MANAGER: frozenset(Capability),
    Role.INSTALLER: frozenset(
        {
            Capability.VIEW_DASHBOARD,
            Capability.VIEW_REPORTS,
            Capability.VIEW_TIME_REPORTS,
            Capability.VIEW_JOB_ENTRIES,
            Capability.CREATE_JOB_ENTRIES,
            Capability.VIEW_JOB_COSTS,
            Capability.VIEW_INVENTORY,
        }
    ),
    Role.DATA_ENTRY: frozenset(
        {
            Capability.VIEW_JOB_ENTRIES,
            Capability.VIEW_ALL_JOB_ENTRIES,
            Capability.CREATE_JOB_ENTRIES,
            Capability.VIEW_INVENTORY,
        }
    ),
}


def parse_role(value: Union[Role, str, None]) -> Role:
    if isinstance(value, Role):
        return value
    try:
        return Role(str(value or "").strip().lower())
    except ValueError as exc:
        raise ValueError(f"Invalid role: {value!r}") from exc


def allowed_operations(role: Union[Role, str]) -> FrozenSet[Capability]:
    """Everything a role may do. Unknown roles get nothing."""
    try:
        return _ROLE_CAPABILITIES[parse_role(role)]
    except ValueError:
        return frozenset()


def require_capability(capability: Capability):
    def dependency(user: CurrentUser = Depends(require_auth)) -> CurrentUser:
        if capability not in allowed_operations(user.role):
            raise HTTPException(status_code=403, detail="Insufficient role")
        return user

    return dependency
