"""Action, permission value and module constants.

Provides:
- ``Action``: the six independent operations a permission can cover.
- ``PermissionValue``: tri-state cell value (granted / denied / unset).
- ``SystemRole``: built-in role names.
- ``Modules``: the closed catalog of capability areas.
- ``ResourceCategory``: categories of concrete resources and their modules.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class Action(str, Enum):
    """Operation on a module or resource.

    Actions are independent bits: ``manage`` does not imply ``delete``.
    """

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    MANAGE = "manage"
    EXPORT = "export"

    @classmethod
    def parse(cls, value: Any) -> "Action | None":
        """Return the Action for ``value`` or None if it is not one."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return None


ALL_ACTIONS: tuple[Action, ...] = tuple(Action)


class PermissionValue(str, Enum):
    """Tri-state value of one (module, action) cell in a role table.

    - ``GRANTED``: explicitly allowed.
    - ``DENIED``: explicitly blocked; short-circuits any looser grant.
    - ``UNSET``: no opinion; resolves to deny at the module check but is
      distinguishable from an authored deny.

    Stored documents use ``True`` for granted and ``"deny"`` for denied;
    ``False``, ``None`` and missing keys all mean unset.
    """

    GRANTED = "granted"
    DENIED = "denied"
    UNSET = "unset"

    @classmethod
    def parse(cls, raw: Any) -> "PermissionValue":
        """Parse a stored cell value. Anything unrecognized is UNSET."""
        if isinstance(raw, cls):
            return raw
        if raw is True:
            return cls.GRANTED
        if isinstance(raw, str):
            lowered = raw.strip().lower()
            if lowered in ("allow", "granted", "grant"):
                return cls.GRANTED
            if lowered in ("deny", "denied"):
                return cls.DENIED
        return cls.UNSET

    def to_stored(self) -> bool | str | None:
        """Inverse of :meth:`parse` in the stored wire format."""
        if self is PermissionValue.GRANTED:
            return True
        if self is PermissionValue.DENIED:
            return "deny"
        return None


class SystemRole:
    """Built-in role names. Never persisted, except member's customization."""

    GLOBAL_ADMIN = "global_admin"
    ADMIN = "admin"
    MEMBER = "member"

    ALL = frozenset({"global_admin", "admin", "member"})


# Modules the tenant admin never reaches; checked before any role table.
GLOBAL_ADMIN_ONLY_MODULES: frozenset[str] = frozenset({"userassignment"})


class Modules:
    """Closed catalog of capability areas, grouped the way admins author them."""

    ADMINISTRATION = (
        "admin",
        "rolemanager",
        "userassignment",
        "miorganizacion",
        "businessintelligence",
        "userdashboard",
    )
    EVENTS = ("allevents", "eventdetails", "eventcoordination", "eventregistration", "events")
    CONTENT = (
        "courseadmin",
        "courses",
        "coursedetail",
        "coursecategories",
        "courseanalytics",
        "subcategorysettings",
        "usercourseprogresss",
    )
    MEDIA = (
        "media",
        "mediaadmin",
        "mediadetail",
        "video",
        "audio",
        "pdf",
        "gallery",
        "galleryadmin",
        "galleryupload",
        "galleryview",
        "galleryimages",
    )
    COMMUNICATION = ("chat", "chatlog", "broadcast", "broadcastview", "socialmedia", "socialmediaaccounts", "forms")
    MEMBERS = (
        "members",
        "memberprofile",
        "memberdashboard",
        "membermessaging",
        "directory",
        "visitors",
        "visitordetails",
        "visitormessages",
        "adminconnect",
        "connectioncenter",
    )
    GROUPS = ("groups", "managegroups", "teams", "createteam", "teamdetail")
    FINANCES = ("finances", "balance", "invoices", "messagebalance")
    FACILITIES = ("rooms", "roomreservations", "inventory", "inventorydetail", "maintenance")
    WORSHIP = ("easyprojector", "songmanager")
    INFORMATION = ("info", "articles", "articledetail", "bible", "lettergenerator", "contact", "search", "sobre")
    ADVANCED = (
        "timetracker",
        "buildmychurch",
        "assistentepastoral",
        "leadershipdevelopment",
        "leadershiprecommendations",
        "leica",
        "process",
        "taskqrlabel",
    )
    USER = ("miperfil", "profile", "usersdropdown", "userresponselog", "family")
    MOBILE = ("churchapp",)
    AUTH = ("login", "register")

    GROUPS_BY_NAME: dict[str, tuple[str, ...]] = {
        "administration": ADMINISTRATION,
        "events": EVENTS,
        "content": CONTENT,
        "media": MEDIA,
        "communication": COMMUNICATION,
        "members": MEMBERS,
        "groups": GROUPS,
        "finances": FINANCES,
        "facilities": FACILITIES,
        "worship": WORSHIP,
        "information": INFORMATION,
        "advanced": ADVANCED,
        "user": USER,
        "mobile": MOBILE,
        "auth": AUTH,
    }

    ALL: tuple[str, ...] = tuple(dict.fromkeys(m for group in GROUPS_BY_NAME.values() for m in group))


class ResourceCategory:
    """Categories of concrete resources that carry per-id policies."""

    FORM = "form"
    INVENTORY = "inventory"
    CATEGORY = "category"
    GALLERY = "gallery"

    ALL = frozenset({"form", "inventory", "category", "gallery"})

    # Module guarding each category
    MODULES: dict[str, str] = {
        "form": "forms",
        "inventory": "inventory",
        "category": "coursecategories",
        "gallery": "gallery",
    }


__all__ = [
    "ALL_ACTIONS",
    "GLOBAL_ADMIN_ONLY_MODULES",
    "Action",
    "Modules",
    "PermissionValue",
    "ResourceCategory",
    "SystemRole",
]
