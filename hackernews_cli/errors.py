from typing import Any, Optional


class HackerNewsError(Exception):
    """Base for every error the client reports."""


# ---- command layer: always recoverable, echoed back to the user

class CommandError(HackerNewsError):
    def __init__(self, input_text: str, detail: str):
        super().__init__(detail)
        self.input_text = input_text
        self.detail = detail


class ParseError(CommandError):
    pass


class UnknownVerb(ParseError):
    def __init__(self, input_text: str, verb: str):
        detail = f"Unknown command: {verb}" if verb else "Empty command"
        super().__init__(input_text, detail)
        self.verb = verb


class ArgumentError(CommandError):
    def __init__(self, input_text: str, verb: str, detail: str):
        super().__init__(input_text, detail)
        self.verb = verb


class MissingArgument(ArgumentError):
    def __init__(self, input_text: str, verb: str):
        super().__init__(input_text, verb, f"'{verb}' needs a numeric argument")


class InvalidArgument(ArgumentError):
    def __init__(self, input_text: str, verb: str, argument: str):
        super().__init__(input_text, verb, f"Invalid number for '{verb}': {argument}")
        self.argument = argument


# ---- fetch layer: aborts the current batch only

class FetchError(HackerNewsError):
    pass


class TransportError(FetchError):
    def __init__(self, url: str, cause: BaseException):
        super().__init__(f"Request to {url} failed: {cause}")
        self.url = url
        self.cause = cause


class SchemaError(FetchError):
    def __init__(self, detail: str, payload: Optional[Any] = None):
        super().__init__(detail)
        self.detail = detail
        self.payload = payload
