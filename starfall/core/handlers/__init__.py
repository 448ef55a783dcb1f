from starfall.core.handlers.registry import HandlerRegistry, build_handler_registry

__all__ = ["HandlerRegistry", "build_handler_registry"]
