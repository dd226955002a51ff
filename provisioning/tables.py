# provisioning/tables.py
# -*- coding: utf-8 -*-
"""
Where each entity type lives in the panel database and what a successful
transition turns its status into.
"""

from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional

from provisioning.models import EntityType, TaskStatus

# None means the row is removed once the transition succeeds.
DEFAULT_SUCCESS_MAP: Mapping[TaskStatus, Optional[TaskStatus]] = {
    TaskStatus.TOADD: TaskStatus.OK,
    TaskStatus.TOCHANGE: TaskStatus.OK,
    TaskStatus.TOCHANGEPWD: TaskStatus.OK,
    TaskStatus.TOENABLE: TaskStatus.OK,
    TaskStatus.TORESTORE: TaskStatus.OK,
    TaskStatus.TODISABLE: TaskStatus.DISABLED,
    TaskStatus.TODELETE: None,
}

PLUGIN_SUCCESS_MAP: Mapping[TaskStatus, Optional[TaskStatus]] = {
    TaskStatus.TOINSTALL: TaskStatus.ENABLED,
    TaskStatus.TOENABLE: TaskStatus.ENABLED,
    TaskStatus.TOUPDATE: TaskStatus.ENABLED,
    TaskStatus.TOCHANGE: TaskStatus.ENABLED,
    TaskStatus.TODISABLE: TaskStatus.DISABLED,
    TaskStatus.TOUNINSTALL: TaskStatus.UNINSTALLED,
}


@dataclass(frozen=True)
class TableSpec:
    """Physical location of an entity type's rows."""

    table: str
    id_column: str
    status_column: str
    error_column: str = "last_error"
    success_map: Mapping[TaskStatus, Optional[TaskStatus]] = field(
        default_factory=lambda: DEFAULT_SUCCESS_MAP, hash=False
    )

    def status_after_success(
        self, status: TaskStatus
    ) -> Optional[TaskStatus]:
        """
        Status a row takes once its transition succeeded; None for deletion.

        Raises:
            ValueError: ``status`` is not a transition this table accepts.
        """
        if status not in self.success_map:
            raise ValueError(
                f"Status '{status}' is not a valid transition for table '{self.table}'"
            )
        return self.success_map[status]


TABLES: Dict[EntityType, TableSpec] = {
    EntityType.PLUGIN: TableSpec(
        "plugin",
        "plugin_id",
        "plugin_status",
        error_column="plugin_error",
        success_map=PLUGIN_SUCCESS_MAP,
    ),
    EntityType.NETWORK_INTERFACE: TableSpec(
        "server_ips", "ip_id", "ip_status"
    ),
    EntityType.SSL_CERTIFICATE: TableSpec("ssl_certs", "cert_id", "status"),
    EntityType.USER: TableSpec("admin", "admin_id", "admin_status"),
    EntityType.DOMAIN: TableSpec("domain", "domain_id", "domain_status"),
    EntityType.SUBDOMAIN: TableSpec(
        "subdomain", "subdomain_id", "subdomain_status"
    ),
    EntityType.DOMAIN_ALIAS: TableSpec(
        "domain_aliasses", "alias_id", "alias_status"
    ),
    EntityType.ALIAS_SUBDOMAIN: TableSpec(
        "subdomain_alias", "subdomain_alias_id", "subdomain_alias_status"
    ),
    EntityType.CUSTOM_DNS_RECORD: TableSpec(
        "domain_dns", "domain_dns_id", "domain_dns_status"
    ),
    EntityType.FTP_USER: TableSpec("ftp_users", "userid", "status"),
    EntityType.MAIL_ACCOUNT: TableSpec("mail_users", "mail_id", "status"),
    EntityType.HTACCESS_USER: TableSpec("htaccess_users", "id", "status"),
    EntityType.HTACCESS_GROUP: TableSpec("htaccess_groups", "id", "status"),
    EntityType.HTACCESS_RULE: TableSpec("htaccess", "id", "status"),
    EntityType.SOFTWARE_INSTANCE: TableSpec(
        "web_software_inst", "software_id", "software_status"
    ),
    EntityType.SOFTWARE_PACKAGE: TableSpec(
        "web_software", "software_id", "software_status"
    ),
}


def table_for(entity_type: EntityType) -> TableSpec:
    try:
        return TABLES[entity_type]
    except KeyError:
        raise KeyError(
            f"Entity type '{entity_type}' has no backing table"
        ) from None
