class WindowControlError(Exception):
    pass


class ConfigurationError(WindowControlError):
    pass


class InvalidArgumentError(WindowControlError):
    pass


class WindowNotFoundError(WindowControlError):
    pass


class SubsystemError(WindowControlError):
    """Raised when the window-management subsystem fails a read or mutation."""


class UnknownMethodError(WindowControlError):
    pass
