from typing import Optional


class ManusError(Exception):
    # base exception for all application-specific errors.
    pass

class ConfigError(ManusError):
    # errors related to configuration.
    pass

class InputError(ManusError):
    # bad input paths or extensions.
    pass

class DataFormatError(ManusError):
    # data files that cannot be read or parsed.
    pass

class MergeError(ManusError):
    # errors while expanding \input directives.
    pass

class ExpressionError(ManusError):
    # errors while evaluating "expr:" values in the data context.
    pass

class ExpressionRecursionError(ExpressionError):
    # evaluation recursed into itself or past the depth ceiling.
    pass

class ContextWriteError(ManusError):
    # an evaluated value could not be written back into the context.
    pass

class RenderError(ManusError):
    # a placeholder in a single line failed to render; subject is the name used to locate it.
    def __init__(self, message: str, column: Optional[int] = None, subject: Optional[str] = None):
        super().__init__(message)
        self.column = column
        self.subject = subject

class OutputError(ManusError):
    # errors during output operations.
    pass

class EngineError(ManusError):
    # errors from the external typesetting engine.
    pass
