# provisioning/queries.py
# -*- coding: utf-8 -*-
"""
Pending-Work Queries.

One statement per pipeline phase. Each returns the columns ``id``, ``name``,
``status`` and ``parent_id`` (NULL for root entities) for the rows that are
eligible right now, ordered by primary key. Every filter is applied by the
database:

- the row's status is one of the phase's pending values;
- the row carries no unresolved error (a failed row waits for the panel to
  clear ``last_error``);
- the parent, if any, is in a consistent state;
- for deletions of entities that can own children, no child row remains.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple

from provisioning.models import EntityType, TaskStatus


def _in(statuses: Iterable[TaskStatus]) -> str:
    return "(" + ", ".join(f"'{s.value}'" for s in statuses) + ")"


CREATION_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOADD,
    TaskStatus.TOCHANGE,
    TaskStatus.TORESTORE,
    TaskStatus.TOENABLE,
    TaskStatus.TODISABLE,
)
USER_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOADD,
    TaskStatus.TOCHANGE,
    TaskStatus.TOCHANGEPWD,
)
ITEM_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOADD,
    TaskStatus.TOCHANGE,
    TaskStatus.TOENABLE,
    TaskStatus.TODISABLE,
    TaskStatus.TODELETE,
)
PLUGIN_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOINSTALL,
    TaskStatus.TOENABLE,
    TaskStatus.TOUPDATE,
    TaskStatus.TOCHANGE,
    TaskStatus.TODISABLE,
    TaskStatus.TOUNINSTALL,
)
SSL_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOADD,
    TaskStatus.TOCHANGE,
    TaskStatus.TODELETE,
)
SOFTWARE_INSTANCE_STATUSES: Tuple[TaskStatus, ...] = (
    TaskStatus.TOADD,
    TaskStatus.TODELETE,
)
SOFTWARE_PACKAGE_STATUSES: Tuple[TaskStatus, ...] = (TaskStatus.TOADD,)

CONSISTENT = _in((TaskStatus.OK, TaskStatus.DISABLED))
# Items owned by a domain may still be processed while the domain is being
# deleted, so that they are gone before the domain itself.
CONSISTENT_OR_DELETING = _in(
    (TaskStatus.OK, TaskStatus.TODELETE, TaskStatus.DISABLED)
)
TODELETE = f"'{TaskStatus.TODELETE.value}'"


@dataclass(frozen=True)
class PendingQuery:
    """A named Pending-Work Query for one entity type."""

    key: str
    entity_type: EntityType
    sql: str


PLUGINS = PendingQuery(
    "plugins",
    EntityType.PLUGIN,
    f"""
        SELECT plugin_id AS id, plugin_name AS name, plugin_status AS status, NULL AS parent_id
        FROM plugin
        WHERE plugin_status IN {_in(PLUGIN_STATUSES)}
        AND plugin_error IS NULL AND plugin_backend = 'yes'
        ORDER BY plugin_priority DESC, plugin_id ASC
    """,
)

# Batch phase: only tells whether anything is pending at all.
NETWORK_INTERFACES_PROBE = PendingQuery(
    "network_interfaces",
    EntityType.NETWORK_INTERFACE,
    """
        SELECT 'all' AS id, 'network interfaces' AS name, 'tochange' AS status, NULL AS parent_id
        FROM server_ips
        WHERE ip_status <> 'ok' AND last_error IS NULL
        LIMIT 1
    """,
)

NETWORK_INTERFACES = PendingQuery(
    "network_interface_rows",
    EntityType.NETWORK_INTERFACE,
    f"""
        SELECT ip_id AS id, ip_number AS name, ip_status AS status, NULL AS parent_id,
            ip_card, ip_netmask, ip_config_mode
        FROM server_ips
        WHERE ip_status IN {_in((TaskStatus.TOADD, TaskStatus.TOCHANGE, TaskStatus.TODELETE))}
        AND last_error IS NULL
        ORDER BY ip_id ASC
    """,
)

SSL_CERTIFICATES = PendingQuery(
    "ssl_certificates",
    EntityType.SSL_CERTIFICATE,
    f"""
        SELECT cert_id AS id, CONCAT(domain_type, ':', cert_id) AS name, status AS status, NULL AS parent_id
        FROM ssl_certs
        WHERE status IN {_in(SSL_STATUSES)} AND last_error IS NULL
        ORDER BY cert_id ASC
    """,
)

USERS = PendingQuery(
    "users",
    EntityType.USER,
    f"""
        SELECT admin_id AS id, admin_name AS name, admin_status AS status, NULL AS parent_id
        FROM admin
        WHERE admin_type = 'user' AND admin_status IN {_in(USER_STATUSES)}
        AND last_error IS NULL
        ORDER BY admin_id ASC
    """,
)

DOMAINS = PendingQuery(
    "domains",
    EntityType.DOMAIN,
    f"""
        SELECT d.domain_id AS id, d.domain_name AS name, d.domain_status AS status,
            d.domain_admin_id AS parent_id
        FROM domain AS d
        INNER JOIN admin AS a ON (a.admin_id = d.domain_admin_id)
        WHERE d.domain_status IN {_in(CREATION_STATUSES)} AND d.last_error IS NULL
        AND a.admin_status IN {CONSISTENT}
        ORDER BY d.domain_id ASC
    """,
)

SUBDOMAINS = PendingQuery(
    "subdomains",
    EntityType.SUBDOMAIN,
    f"""
        SELECT s.subdomain_id AS id, CONCAT(s.subdomain_name, '.', d.domain_name) AS name,
            s.subdomain_status AS status, s.domain_id AS parent_id
        FROM subdomain AS s
        INNER JOIN domain AS d ON (d.domain_id = s.domain_id)
        WHERE s.subdomain_status IN {_in(CREATION_STATUSES)} AND s.last_error IS NULL
        AND d.domain_status IN {CONSISTENT}
        ORDER BY s.subdomain_id ASC
    """,
)

DOMAIN_ALIASES = PendingQuery(
    "domain_aliases",
    EntityType.DOMAIN_ALIAS,
    f"""
        SELECT al.alias_id AS id, al.alias_name AS name, al.alias_status AS status,
            al.domain_id AS parent_id
        FROM domain_aliasses AS al
        INNER JOIN domain AS d ON (d.domain_id = al.domain_id)
        WHERE al.alias_status IN {_in(CREATION_STATUSES)} AND al.last_error IS NULL
        AND d.domain_status IN {CONSISTENT}
        ORDER BY al.alias_id ASC
    """,
)

ALIAS_SUBDOMAINS = PendingQuery(
    "alias_subdomains",
    EntityType.ALIAS_SUBDOMAIN,
    f"""
        SELECT sa.subdomain_alias_id AS id, CONCAT(sa.subdomain_alias_name, '.', al.alias_name) AS name,
            sa.subdomain_alias_status AS status, sa.alias_id AS parent_id
        FROM subdomain_alias AS sa
        INNER JOIN domain_aliasses AS al ON (al.alias_id = sa.alias_id)
        WHERE sa.subdomain_alias_status IN {_in(CREATION_STATUSES)} AND sa.last_error IS NULL
        AND al.alias_status IN {CONSISTENT}
        ORDER BY sa.subdomain_alias_id ASC
    """,
)

DOMAIN_DNS_RECORDS = PendingQuery(
    "domain_dns_records",
    EntityType.CUSTOM_DNS_RECORD,
    f"""
        SELECT r.domain_dns_id AS id, CONCAT(r.domain_dns, ' ', r.domain_type) AS name,
            r.domain_dns_status AS status, r.domain_id AS parent_id
        FROM domain_dns AS r
        INNER JOIN domain AS d ON (d.domain_id = r.domain_id)
        WHERE r.domain_dns_status IN {_in(ITEM_STATUSES)} AND r.last_error IS NULL
        AND r.alias_id = 0 AND d.domain_status IN {CONSISTENT}
        ORDER BY r.domain_dns_id ASC
    """,
)

ALIAS_DNS_RECORDS = PendingQuery(
    "alias_dns_records",
    EntityType.CUSTOM_DNS_RECORD,
    f"""
        SELECT r.domain_dns_id AS id, CONCAT(r.domain_dns, ' ', r.domain_type) AS name,
            r.domain_dns_status AS status, r.alias_id AS parent_id
        FROM domain_dns AS r
        INNER JOIN domain_aliasses AS al ON (al.alias_id = r.alias_id)
        WHERE r.domain_dns_status IN {_in(ITEM_STATUSES)} AND r.last_error IS NULL
        AND r.alias_id <> 0 AND al.alias_status IN {CONSISTENT}
        ORDER BY r.domain_dns_id ASC
    """,
)

FTP_USERS = PendingQuery(
    "ftp_users",
    EntityType.FTP_USER,
    f"""
        SELECT f.userid AS id, f.userid AS name, f.status AS status, d.domain_id AS parent_id
        FROM ftp_users AS f
        INNER JOIN domain AS d ON (d.domain_admin_id = f.admin_id)
        WHERE f.status IN {_in(ITEM_STATUSES)} AND f.last_error IS NULL
        AND d.domain_status IN {CONSISTENT_OR_DELETING}
        ORDER BY f.userid ASC
    """,
)

MAIL_ACCOUNTS = PendingQuery(
    "mail_accounts",
    EntityType.MAIL_ACCOUNT,
    f"""
        SELECT m.mail_id AS id, m.mail_addr AS name, m.status AS status, m.domain_id AS parent_id
        FROM mail_users AS m
        INNER JOIN domain AS d ON (d.domain_id = m.domain_id)
        WHERE m.status IN {_in(ITEM_STATUSES)} AND m.last_error IS NULL
        AND d.domain_status IN {CONSISTENT_OR_DELETING}
        ORDER BY m.mail_id ASC
    """,
)

HTACCESS_USERS = PendingQuery(
    "htaccess_users",
    EntityType.HTACCESS_USER,
    f"""
        SELECT h.id AS id, CONCAT(h.uname, ':', h.id) AS name, h.status AS status, h.dmn_id AS parent_id
        FROM htaccess_users AS h
        INNER JOIN domain AS d ON (d.domain_id = h.dmn_id)
        WHERE h.status IN {_in(ITEM_STATUSES)} AND h.last_error IS NULL
        AND d.domain_status IN {CONSISTENT_OR_DELETING}
        ORDER BY h.id ASC
    """,
)

HTACCESS_GROUPS = PendingQuery(
    "htaccess_groups",
    EntityType.HTACCESS_GROUP,
    f"""
        SELECT h.id AS id, CONCAT(h.ugroup, ':', h.id) AS name, h.status AS status, h.dmn_id AS parent_id
        FROM htaccess_groups AS h
        INNER JOIN domain AS d ON (d.domain_id = h.dmn_id)
        WHERE h.status IN {_in(ITEM_STATUSES)} AND h.last_error IS NULL
        AND d.domain_status IN {CONSISTENT_OR_DELETING}
        ORDER BY h.id ASC
    """,
)

HTACCESS_RULES = PendingQuery(
    "htaccess_rules",
    EntityType.HTACCESS_RULE,
    f"""
        SELECT h.id AS id, CONCAT(h.auth_name, ':', h.id) AS name, h.status AS status, h.dmn_id AS parent_id
        FROM htaccess AS h
        INNER JOIN domain AS d ON (d.domain_id = h.dmn_id)
        WHERE h.status IN {_in(ITEM_STATUSES)} AND h.last_error IS NULL
        AND d.domain_status IN {CONSISTENT_OR_DELETING}
        ORDER BY h.id ASC
    """,
)

# --- Deletion sweep, children before parents ---

ALIAS_SUBDOMAINS_DELETE = PendingQuery(
    "alias_subdomains_delete",
    EntityType.ALIAS_SUBDOMAIN,
    f"""
        SELECT sa.subdomain_alias_id AS id, CONCAT(sa.subdomain_alias_name, '.', al.alias_name) AS name,
            sa.subdomain_alias_status AS status, sa.alias_id AS parent_id
        FROM subdomain_alias AS sa
        INNER JOIN domain_aliasses AS al ON (al.alias_id = sa.alias_id)
        WHERE sa.subdomain_alias_status = {TODELETE} AND sa.last_error IS NULL
        ORDER BY sa.subdomain_alias_id ASC
    """,
)

DOMAIN_ALIASES_DELETE = PendingQuery(
    "domain_aliases_delete",
    EntityType.DOMAIN_ALIAS,
    f"""
        SELECT al.alias_id AS id, al.alias_name AS name, al.alias_status AS status,
            al.domain_id AS parent_id
        FROM domain_aliasses AS al
        WHERE al.alias_status = {TODELETE} AND al.last_error IS NULL
        AND NOT EXISTS (SELECT 1 FROM subdomain_alias AS sa WHERE sa.alias_id = al.alias_id)
        ORDER BY al.alias_id ASC
    """,
)

SUBDOMAINS_DELETE = PendingQuery(
    "subdomains_delete",
    EntityType.SUBDOMAIN,
    f"""
        SELECT s.subdomain_id AS id, CONCAT(s.subdomain_name, '.', d.domain_name) AS name,
            s.subdomain_status AS status, s.domain_id AS parent_id
        FROM subdomain AS s
        INNER JOIN domain AS d ON (d.domain_id = s.domain_id)
        WHERE s.subdomain_status = {TODELETE} AND s.last_error IS NULL
        ORDER BY s.subdomain_id ASC
    """,
)

DOMAINS_DELETE = PendingQuery(
    "domains_delete",
    EntityType.DOMAIN,
    f"""
        SELECT d.domain_id AS id, d.domain_name AS name, d.domain_status AS status,
            d.domain_admin_id AS parent_id
        FROM domain AS d
        WHERE d.domain_status = {TODELETE} AND d.last_error IS NULL
        AND NOT EXISTS (SELECT 1 FROM subdomain AS s WHERE s.domain_id = d.domain_id)
        AND NOT EXISTS (SELECT 1 FROM domain_aliasses AS al WHERE al.domain_id = d.domain_id)
        ORDER BY d.domain_id ASC
    """,
)

USERS_DELETE = PendingQuery(
    "users_delete",
    EntityType.USER,
    f"""
        SELECT a.admin_id AS id, a.admin_name AS name, a.admin_status AS status, NULL AS parent_id
        FROM admin AS a
        WHERE a.admin_type = 'user' AND a.admin_status = {TODELETE} AND a.last_error IS NULL
        AND NOT EXISTS (SELECT 1 FROM domain AS d WHERE d.domain_admin_id = a.admin_id)
        ORDER BY a.admin_id ASC
    """,
)

# --- Out-of-process software tasks ---

SOFTWARE_INSTANCES = PendingQuery(
    "software_instances",
    EntityType.SOFTWARE_INSTANCE,
    f"""
        SELECT software_id AS id, CONCAT(path, ' (domain ', domain_id, ')') AS name,
            software_status AS status, domain_id AS parent_id,
            domain_id, alias_id, subdomain_id, subdomain_alias_id, software_id, path,
            software_prefix, db, database_user, database_tmp_pwd, install_username,
            install_password, install_email, software_status, software_depot, software_master_id
        FROM web_software_inst
        WHERE software_status IN {_in(SOFTWARE_INSTANCE_STATUSES)} AND last_error IS NULL
        ORDER BY domain_id ASC, software_id ASC
    """,
)

SOFTWARE_PACKAGES = PendingQuery(
    "software_packages",
    EntityType.SOFTWARE_PACKAGE,
    f"""
        SELECT software_id AS id, software_archive AS name, software_status AS status,
            NULL AS parent_id,
            software_id, reseller_id, software_archive, software_status, software_depot
        FROM web_software
        WHERE software_status IN {_in(SOFTWARE_PACKAGE_STATUSES)} AND last_error IS NULL
        ORDER BY reseller_id ASC, software_id ASC
    """,
)

# Addresses referenced by consistent domains and aliases; input of the IP
# reconciliation phase.
IP_ADDRESSES_IN_USE = f"""
    SELECT DISTINCT i.ip_id, i.ip_number, i.ip_card
    FROM server_ips AS i
    WHERE i.ip_status = 'ok' AND (
        EXISTS (
            SELECT 1 FROM domain AS d
            WHERE d.domain_ip_id = i.ip_id AND d.domain_status IN {CONSISTENT}
        )
        OR EXISTS (
            SELECT 1 FROM domain_aliasses AS al
            WHERE al.alias_ip_id = i.ip_id AND al.alias_status IN {CONSISTENT}
        )
    )
    ORDER BY i.ip_id ASC
"""
