"""
Handler Registry.

Maps each entity type to the class that provisions it. The map is fixed at
construction; handlers are instantiated on first use only, so an entity
type with nothing pending in a run never has its handler built or set up.
"""

import logging
from typing import TYPE_CHECKING, Dict, Mapping, Optional, Union

from provisioning.errors import HandlerResolutionError
from provisioning.handlers import DEFAULT_HANDLERS, HandlerClass
from provisioning.handlers.base import BatchTaskHandler, TaskHandler
from provisioning.models import EntityType

if TYPE_CHECKING:
    from provisioning.context import RunContext

Handler = Union[TaskHandler, BatchTaskHandler]


class HandlerRegistry:
    """
    Registry of handler classes with lazily built, cached instances.
    """

    def __init__(
        self,
        context: "RunContext",
        handlers: Optional[Mapping[EntityType, HandlerClass]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.context = context
        self.logger = logger or context.logger
        self._registry: Dict[EntityType, HandlerClass] = dict(
            DEFAULT_HANDLERS if handlers is None else handlers
        )
        self._instances: Dict[EntityType, Handler] = {}

    def get_handler_class(self, entity_type: EntityType) -> HandlerClass:
        """
        Raises:
            KeyError: If no handler is registered for the entity type.
        """
        if entity_type not in self._registry:
            raise KeyError(f"No handler registered for '{entity_type}'")
        return self._registry[entity_type]

    def resolve(self, entity_type: EntityType) -> Handler:
        """
        Return the handler instance for ``entity_type``, building it on first use.

        Raises:
            HandlerResolutionError: No handler is registered, or it could not
                be instantiated or set up.
        """
        if entity_type in self._instances:
            return self._instances[entity_type]

        try:
            handler_class = self.get_handler_class(entity_type)
        except KeyError as e:
            raise HandlerResolutionError(str(e), original_error=e) from e

        try:
            handler = handler_class(entity_type, self.context)
            handler.setup()
        except Exception as e:
            raise HandlerResolutionError(
                f"Could not load handler {handler_class.__name__} for '{entity_type}': {e}",
                original_error=e,
            ) from e

        self.logger.debug(
            f"Resolved {handler_class.__name__} for '{entity_type}'"
        )
        self._instances[entity_type] = handler
        return handler
