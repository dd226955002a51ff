# provisioning/models.py
# -*- coding: utf-8 -*-
"""
Core value types: entity types, task statuses, task rows and outcomes.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Union


class EntityType(str, Enum):
    """The fixed set of hosting entities the engine knows how to process."""

    PLUGIN = "Plugin"
    NETWORK_INTERFACE = "NetworkInterface"
    SSL_CERTIFICATE = "SslCertificate"
    USER = "User"
    DOMAIN = "Domain"
    SUBDOMAIN = "Subdomain"
    DOMAIN_ALIAS = "DomainAlias"
    ALIAS_SUBDOMAIN = "AliasSubdomain"
    CUSTOM_DNS_RECORD = "CustomDnsRecord"
    FTP_USER = "FtpUser"
    MAIL_ACCOUNT = "MailAccount"
    HTACCESS_USER = "HtAccessUser"
    HTACCESS_GROUP = "HtAccessGroup"
    HTACCESS_RULE = "HtAccessRule"
    IP_ADDRESS = "IpAddress"
    SOFTWARE_PACKAGE = "SoftwarePackage"
    SOFTWARE_INSTANCE = "SoftwareInstance"

    def __str__(self) -> str:
        return self.value


class TaskStatus(str, Enum):
    """Values of an entity's status column."""

    TOADD = "toadd"
    TOCHANGE = "tochange"
    TOCHANGEPWD = "tochangepwd"
    TOENABLE = "toenable"
    TODISABLE = "todisable"
    TORESTORE = "torestore"
    TODELETE = "todelete"
    # plugin lifecycle
    TOINSTALL = "toinstall"
    TOUPDATE = "toupdate"
    TOUNINSTALL = "touninstall"

    OK = "ok"
    DISABLED = "disabled"
    ENABLED = "enabled"
    UNINSTALLED = "uninstalled"

    def __str__(self) -> str:
        return self.value

    @property
    def is_pending(self) -> bool:
        return self in PENDING_STATUSES


PENDING_STATUSES = frozenset(
    {
        TaskStatus.TOADD,
        TaskStatus.TOCHANGE,
        TaskStatus.TOCHANGEPWD,
        TaskStatus.TOENABLE,
        TaskStatus.TODISABLE,
        TaskStatus.TORESTORE,
        TaskStatus.TODELETE,
        TaskStatus.TOINSTALL,
        TaskStatus.TOUPDATE,
        TaskStatus.TOUNINSTALL,
    }
)

# A parent must hold one of these before its children become eligible.
CONSISTENT_STATUSES = frozenset({TaskStatus.OK, TaskStatus.DISABLED})


@dataclass(frozen=True)
class TaskRow:
    """One persisted entity instance awaiting work."""

    entity_type: EntityType
    id: Any
    name: str
    status: TaskStatus
    parent_id: Optional[Any] = None
    # Extra columns some queries select (software payload fields).
    data: Dict[str, Any] = field(default_factory=dict, compare=False)

    def describe(self) -> str:
        return f"{self.entity_type} ({self.status}) tasks for: {self.name} (ID {self.id})"


@dataclass(frozen=True)
class Success:
    """The handler completed the requested transition."""

    def __bool__(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The handler could not complete the transition; ``message`` says why."""

    message: str = "Unknown error"

    def __bool__(self) -> bool:
        return False


Outcome = Union[Success, Failure]
