"""
Process-wide wiring of the kernel's buses, registries and ambient services.
"""

from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple, Type, Union

from ddd_kernel.domain.events.base import Event
from ddd_kernel.domain.events.domain_event import DomainEvent
from ddd_kernel.domain.events.registry import (
    AggregateBuilder, AggregateRegistry, EventRegistry, HandlerRegistry
)
from ddd_kernel.domain.events.router import EventBusRouter
from ddd_kernel.domain.interfaces.base import ILogger
from ddd_kernel.domain.interfaces.event_bus import IEventHandler
from ddd_kernel.domain.models.configuration import KernelConfiguration
from ddd_kernel.infrastructure.configuration.manager import ConfigurationManager
from ddd_kernel.infrastructure.error_handling.handler import ErrorHandler
from ddd_kernel.infrastructure.event_bus.in_memory import InMemoryAsyncEventBus
from ddd_kernel.infrastructure.logging.logger import LoggerFactory

# (handler, event classes / kinds or '*')
HandlerBinding = Tuple[IEventHandler[Any], Union[str, Iterable[Union[str, Type[Event]]]]]


@dataclass
class Kernel:
    """Everything a command handler needs to publish aggregate events."""

    config: KernelConfiguration
    logger: ILogger
    error_handler: ErrorHandler
    event_registry: EventRegistry
    aggregate_registry: AggregateRegistry
    uncommitted_handlers: HandlerRegistry
    committed_handlers: HandlerRegistry
    uncommitted_bus: InMemoryAsyncEventBus
    committed_bus: InMemoryAsyncEventBus
    router: EventBusRouter
    config_manager: Optional[ConfigurationManager] = None

    def shutdown(self) -> None:
        if self.config_manager is not None:
            self.config_manager.stop_hot_reload()


def bootstrap(config_path: Optional[str] = None,
              config: Optional[KernelConfiguration] = None,
              event_classes: Iterable[Type[DomainEvent]] = (),
              aggregate_builders: Iterable[Tuple[Type[DomainEvent], AggregateBuilder]] = (),
              uncommitted_handlers: Iterable[HandlerBinding] = (),
              committed_handlers: Iterable[HandlerBinding] = (),
              hot_reload: bool = False) -> Kernel:
    """Build the kernel.

    Configuration comes from ``config``, else from the JSON file at
    ``config_path``, else defaults. Handlers are registered here and the
    handler registries are frozen before the kernel is returned.
    """
    config_manager = None
    if config is None and config_path is not None:
        setup_logger = LoggerFactory.create_component_logger("configuration", KernelConfiguration())
        config_manager = ConfigurationManager(config_path, setup_logger)
        config = config_manager.get_kernel_config()
    config = config or KernelConfiguration()

    logger = LoggerFactory.create_component_logger("kernel", config)
    error_handler = ErrorHandler(logger)

    event_registry = EventRegistry()
    for event_class in event_classes:
        event_registry.register(event_class)

    aggregate_registry = AggregateRegistry()
    for creation_event_class, builder in aggregate_builders:
        aggregate_registry.register(creation_event_class, builder)

    uncommitted_registry = _build_handler_registry(uncommitted_handlers)
    committed_registry = _build_handler_registry(committed_handlers)

    uncommitted_bus = InMemoryAsyncEventBus(
        uncommitted_registry, logger, error_handler,
        raise_handler_errors=config.raise_handler_errors,
        handler_timeout=config.handler_timeout,
        name="uncommitted"
    )
    committed_bus = InMemoryAsyncEventBus(
        committed_registry, logger, error_handler,
        raise_handler_errors=config.raise_handler_errors,
        handler_timeout=config.handler_timeout,
        name="committed"
    )

    if config_manager is not None:
        def apply_bus_settings(new_config: KernelConfiguration) -> None:
            for bus in (uncommitted_bus, committed_bus):
                bus.raise_handler_errors = new_config.raise_handler_errors
                bus.handler_timeout = new_config.handler_timeout

        config_manager.add_change_callback(apply_bus_settings)
        if hot_reload:
            config_manager.start_hot_reload()

    logger.info(
        "Kernel initialized",
        event_kinds=event_registry.kinds(),
        log_level=config.log_level
    )

    return Kernel(
        config=config,
        logger=logger,
        error_handler=error_handler,
        event_registry=event_registry,
        aggregate_registry=aggregate_registry,
        uncommitted_handlers=uncommitted_registry,
        committed_handlers=committed_registry,
        uncommitted_bus=uncommitted_bus,
        committed_bus=committed_bus,
        router=EventBusRouter(uncommitted_bus, committed_bus),
        config_manager=config_manager,
    )


def _build_handler_registry(bindings: Iterable[HandlerBinding]) -> HandlerRegistry:
    registry = HandlerRegistry()
    for handler, events in bindings:
        registry.register(handler, events)
    registry.freeze()
    return registry
