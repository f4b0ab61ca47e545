"""Registry of topic handlers.

Handlers are added once at startup and looked up by name on every dispatch.
Adding a handler under a name that is already taken replaces the previous
one (last registration wins).
"""
from __future__ import annotations

import importlib
import threading
from typing import Dict, Iterable, List

from topic_hub.core.exceptions import HandlerLoadError, HandlerNotFound
from topic_hub.core.topic.handlers import TopicHandler
from topic_hub.utils.logger import setup_logger

logger = setup_logger(__name__)


class HandlerRegistry:

    def __init__(self, handlers: Iterable[TopicHandler] = ()) -> None:
        self._handlers: Dict[str, TopicHandler] = {}
        self._lock = threading.RLock()
        for handler in handlers:
            self.add(handler)

    def add(self, handler: TopicHandler) -> None:
        with self._lock:
            previous = self._handlers.get(handler.name)
            if previous is not None and previous is not handler:
                logger.debug("Replacing handler registered as %s", handler.name)
            self._handlers[handler.name] = handler

    def get(self, name: str) -> TopicHandler:
        """Get handler by name. Raises HandlerNotFound if not found."""
        with self._lock:
            try:
                return self._handlers[name]
            except KeyError:
                raise HandlerNotFound(name) from None

    def has(self, name: str) -> bool:
        with self._lock:
            return name in self._handlers

    def names(self) -> List[str]:
        with self._lock:
            return sorted(self._handlers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)


def _resolve(path: str) -> object:
    module_name, _, attr = path.partition(":")
    if not module_name or not attr:
        raise HandlerLoadError(f"Invalid handler path {path!r}; expected 'package.module:attribute'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise HandlerLoadError(f"Cannot import {module_name}: {e}") from e
    try:
        return getattr(module, attr)
    except AttributeError:
        raise HandlerLoadError(f"Module {module_name} has no attribute {attr}") from None


def load_handlers(registry: HandlerRegistry, paths: Iterable[str]) -> List[TopicHandler]:
    """Import handlers from ``module:attribute`` paths and add them to ``registry``.

    The attribute may be a handler instance, a handler class, or a factory
    returning a handler.
    """
    loaded: List[TopicHandler] = []
    for path in paths:
        candidate = _resolve(path)
        # classes satisfy the protocol structurally, so instantiate them first
        if isinstance(candidate, type) or (not isinstance(candidate, TopicHandler) and callable(candidate)):
            candidate = candidate()
        if not isinstance(candidate, TopicHandler):
            raise HandlerLoadError(f"{path} does not provide a topic handler")
        registry.add(candidate)
        loaded.append(candidate)
        logger.info("Loaded topic handler %s from %s", candidate.name, path)
    return loaded
