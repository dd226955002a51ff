import pytest

from provisioning.errors import HandlerResolutionError
from provisioning.handlers import DEFAULT_HANDLERS
from provisioning.handlers.base import BatchTaskHandler, TaskHandler
from provisioning.handlers.hooks import HookTaskHandler
from provisioning.handlers.ips import IpAddressHandler
from provisioning.handlers.network import NetworkInterfaceHandler
from provisioning.models import EntityType, Success
from provisioning.registry import HandlerRegistry


class DummyHandler(TaskHandler):
    instances = 0

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        DummyHandler.instances += 1

    def handle(self, row, action):
        return Success()


class BrokenSetupHandler(TaskHandler):
    def setup(self):
        raise RuntimeError("hook directory unreadable")

    def handle(self, row, action):
        return Success()


@pytest.fixture(autouse=True)
def reset_counter():
    DummyHandler.instances = 0


def test_default_handlers_cover_every_entity_type():
    assert set(DEFAULT_HANDLERS) == set(EntityType)
    assert DEFAULT_HANDLERS[EntityType.DOMAIN] is HookTaskHandler
    assert DEFAULT_HANDLERS[EntityType.NETWORK_INTERFACE] is NetworkInterfaceHandler
    assert DEFAULT_HANDLERS[EntityType.IP_ADDRESS] is IpAddressHandler
    assert issubclass(DEFAULT_HANDLERS[EntityType.IP_ADDRESS], BatchTaskHandler)


def test_resolve_is_lazy_and_cached(run_context):
    registry = HandlerRegistry(run_context, {EntityType.DOMAIN: DummyHandler})
    assert DummyHandler.instances == 0

    first = registry.resolve(EntityType.DOMAIN)
    second = registry.resolve(EntityType.DOMAIN)

    assert first is second
    assert DummyHandler.instances == 1
    assert first.entity_type is EntityType.DOMAIN


def test_resolve_unregistered_type(run_context):
    registry = HandlerRegistry(run_context, {})

    with pytest.raises(HandlerResolutionError, match="No handler registered"):
        registry.resolve(EntityType.DOMAIN)


def test_resolve_wraps_setup_failure(run_context):
    registry = HandlerRegistry(run_context, {EntityType.DOMAIN: BrokenSetupHandler})

    with pytest.raises(HandlerResolutionError, match="hook directory unreadable"):
        registry.resolve(EntityType.DOMAIN)
    # A failed setup is not cached; the next resolve tries again.
    with pytest.raises(HandlerResolutionError):
        registry.resolve(EntityType.DOMAIN)


def test_get_handler_class(run_context):
    registry = HandlerRegistry(run_context)
    assert registry.get_handler_class(EntityType.MAIL_ACCOUNT) is HookTaskHandler
    with pytest.raises(KeyError):
        HandlerRegistry(run_context, {}).get_handler_class(EntityType.MAIL_ACCOUNT)
