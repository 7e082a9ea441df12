"""
Message Bus

In-process routing of commands to their single handler and of domain
events to every subscribed handler. Handlers are registered from each
app's ``AppConfig.ready()``.
"""

from typing import Dict, List, Callable, Type, Any
import logging

from shared.domain.base import DomainEvent

logger = logging.getLogger(__name__)


def _handler_name(handler: Callable) -> str:
    return getattr(handler, '__qualname__', None) or type(handler).__name__


class MessageBus:
    """
    Commands: one handler per command type, result returned, errors raised.
    Events: any number of handlers per event type, errors logged and isolated.
    """

    def __init__(self):
        self._event_handlers: Dict[Type[DomainEvent], List[Callable]] = {}
        self._command_handlers: Dict[Type, Callable] = {}

    def register_event_handler(
        self,
        event_type: Type[DomainEvent],
        handler: Callable[[DomainEvent], None]
    ):
        handlers = self._event_handlers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug(f"Registered event handler {_handler_name(handler)} for {event_type.__name__}")

    def register_command_handler(
        self,
        command_type: Type,
        handler: Callable[[Any], Any]
    ):
        """Register the handler for ``command_type``; a second registration is an error."""
        if command_type in self._command_handlers:
            raise ValueError(
                f"Handler for {command_type.__name__} is already registered. "
                "Commands can have only one handler."
            )
        self._command_handlers[command_type] = handler
        logger.debug(f"Registered command handler for {command_type.__name__}")

    def has_command_handler(self, command_type: Type) -> bool:
        return command_type in self._command_handlers

    def handle_command(self, command: Any) -> Any:
        command_type = type(command)
        handler = self._command_handlers.get(command_type)

        if not handler:
            raise ValueError(
                f"No handler registered for command {command_type.__name__}"
            )

        logger.debug(f"Handling command: {command_type.__name__}")
        try:
            return handler(command)
        except Exception as e:
            logger.info(f"Command {command_type.__name__} raised {e.__class__.__name__}: {e}")
            raise

    def publish_events(self, events: List[DomainEvent]):
        """
        Deliver each event to its handlers.

        A failing handler is logged and skipped; the remaining handlers
        still run. Nothing here can undo the transaction that raised the
        events, it has already committed.
        """
        for event in events:
            event_type = type(event)
            handlers = self._event_handlers.get(event_type, [])

            if not handlers:
                logger.debug(f"No handlers registered for event {event_type.__name__}")
                continue

            logger.info(f"Publishing event: {event_type.__name__} (ID: {event.event_id})")

            for handler in list(handlers):
                try:
                    handler(event)
                except Exception as e:
                    logger.error(
                        f"Error in event handler {_handler_name(handler)} "
                        f"for event {event_type.__name__}: {e}",
                        exc_info=True
                    )


message_bus = MessageBus()
