# provisioning/phases.py
# -*- coding: utf-8 -*-
"""
The fixed pipeline.

Creation and change flow parent to child so a child is never provisioned
against an inconsistent parent; the deletion sweep then flows child to
parent so a parent is never torn down while children still reference it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from provisioning import queries
from provisioning.models import EntityType
from provisioning.queries import PendingQuery


class PhaseKind(str, Enum):
    ROWS = "rows"
    BATCH = "batch"
    IP_RECONCILIATION = "ip_reconciliation"
    EXTERNAL = "external"


@dataclass(frozen=True)
class Phase:
    key: str
    entity_type: EntityType
    kind: PhaseKind
    query: Optional[PendingQuery] = None
    # Work in this phase means listening addresses may have to change.
    ip_relevant: bool = False


def _rows(query: PendingQuery, ip_relevant: bool = False) -> Phase:
    return Phase(
        query.key, query.entity_type, PhaseKind.ROWS, query, ip_relevant
    )


def _external(query: PendingQuery) -> Phase:
    return Phase(query.key, query.entity_type, PhaseKind.EXTERNAL, query)


PIPELINE: Tuple[Phase, ...] = (
    # Plugins first so that what they register is in place for later phases.
    _rows(queries.PLUGINS),
    Phase(
        "network_interfaces",
        EntityType.NETWORK_INTERFACE,
        PhaseKind.BATCH,
        queries.NETWORK_INTERFACES_PROBE,
    ),
    _rows(queries.SSL_CERTIFICATES),
    _rows(queries.USERS),
    _rows(queries.DOMAINS, ip_relevant=True),
    _rows(queries.SUBDOMAINS, ip_relevant=True),
    _rows(queries.DOMAIN_ALIASES, ip_relevant=True),
    _rows(queries.ALIAS_SUBDOMAINS, ip_relevant=True),
    _rows(queries.DOMAIN_DNS_RECORDS),
    _rows(queries.ALIAS_DNS_RECORDS),
    _rows(queries.FTP_USERS),
    _rows(queries.MAIL_ACCOUNTS),
    _rows(queries.HTACCESS_USERS),
    _rows(queries.HTACCESS_GROUPS),
    _rows(queries.HTACCESS_RULES),
    # Deletion sweep, children before parents.
    _rows(queries.ALIAS_SUBDOMAINS_DELETE, ip_relevant=True),
    _rows(queries.DOMAIN_ALIASES_DELETE, ip_relevant=True),
    _rows(queries.SUBDOMAINS_DELETE, ip_relevant=True),
    _rows(queries.DOMAINS_DELETE, ip_relevant=True),
    _rows(queries.USERS_DELETE),
    Phase(
        "ip_addresses",
        EntityType.IP_ADDRESS,
        PhaseKind.IP_RECONCILIATION,
    ),
    _external(queries.SOFTWARE_INSTANCES),
    _external(queries.SOFTWARE_PACKAGES),
)
