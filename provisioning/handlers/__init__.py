"""
Handlers shipped with the engine, keyed by the entity type they serve.
"""

from typing import Dict, Type, Union

from provisioning.handlers.base import BatchTaskHandler, TaskHandler
from provisioning.handlers.hooks import HookTaskHandler
from provisioning.handlers.ips import IpAddressHandler
from provisioning.handlers.network import NetworkInterfaceHandler
from provisioning.handlers.software import (
    SoftwareInstanceHandler,
    SoftwarePackageHandler,
)
from provisioning.models import EntityType

HandlerClass = Union[Type[TaskHandler], Type[BatchTaskHandler]]

DEFAULT_HANDLERS: Dict[EntityType, HandlerClass] = {
    EntityType.PLUGIN: HookTaskHandler,
    EntityType.NETWORK_INTERFACE: NetworkInterfaceHandler,
    EntityType.SSL_CERTIFICATE: HookTaskHandler,
    EntityType.USER: HookTaskHandler,
    EntityType.DOMAIN: HookTaskHandler,
    EntityType.SUBDOMAIN: HookTaskHandler,
    EntityType.DOMAIN_ALIAS: HookTaskHandler,
    EntityType.ALIAS_SUBDOMAIN: HookTaskHandler,
    EntityType.CUSTOM_DNS_RECORD: HookTaskHandler,
    EntityType.FTP_USER: HookTaskHandler,
    EntityType.MAIL_ACCOUNT: HookTaskHandler,
    EntityType.HTACCESS_USER: HookTaskHandler,
    EntityType.HTACCESS_GROUP: HookTaskHandler,
    EntityType.HTACCESS_RULE: HookTaskHandler,
    EntityType.IP_ADDRESS: IpAddressHandler,
    EntityType.SOFTWARE_INSTANCE: SoftwareInstanceHandler,
    EntityType.SOFTWARE_PACKAGE: SoftwarePackageHandler,
}

__all__ = [
    "BatchTaskHandler",
    "DEFAULT_HANDLERS",
    "HookTaskHandler",
    "IpAddressHandler",
    "NetworkInterfaceHandler",
    "SoftwareInstanceHandler",
    "SoftwarePackageHandler",
    "TaskHandler",
]
