from __future__ import annotations


class HandlerNotFound(LookupError):
    def __init__(self, name: str):
        super().__init__(f'Could not find topic dispatcher in registry for callback "{name}".')
        self.name = name


class HandlerLoadError(RuntimeError):
    pass


class FirewallRejection(Exception):
    """Access to a topic was refused by a secured handler.

    ``secure`` may either return an instance (tagged result) or raise it;
    the dispatcher treats both the same way.
    """

    def __init__(self, reason: str = "Access denied"):
        super().__init__(reason)
        self.reason = reason


class PushUnsupported(Exception):
    def __init__(self, handler_name: str):
        super().__init__(f'The "{handler_name}" topic does not support push notifications.')
        self.handler_name = handler_name
