"""Errors raised while decoding and walking database files."""


class MagpieError(Exception):
    """Base class for every magpie-db error."""


class DecodeError(MagpieError, ValueError):
    """The file contents could not be decoded."""


class UnexpectedEof(DecodeError, EOFError):
    """The stream ended before a complete value could be read."""


class InvalidVarint(DecodeError):
    """A varint ran past its 9 byte limit."""


class InvalidPageSize(DecodeError):
    def __init__(self, page_size: int):
        super().__init__(f"Page size must be a power of 2, got {page_size}")
        self.page_size = page_size


class InvalidPageType(DecodeError):
    def __init__(self, value: int):
        super().__init__(f"Unknown file page type: {value}")
        self.value = value


class InvalidRecordType(DecodeError):
    def __init__(self, code: int):
        super().__init__(f"Unknown record type: {code}")
        self.code = code


class UnsupportedEncoding(DecodeError):
    def __init__(self, encoding: int):
        super().__init__(f"Unsupported text encoding: {encoding} (only 1 = UTF-8 is supported)")
        self.encoding = encoding


class TraversalError(MagpieError):
    """The tree could not be walked."""


class MissingPage(TraversalError, KeyError):
    """A page was referenced that is not present in the page store."""

    def __init__(self, page_number: int):
        super().__init__(f"Page {page_number} is not in the page store")
        self.page_number = page_number

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return self.args[0]


class PageCycleError(TraversalError):
    def __init__(self, page_number: int):
        super().__init__(f"Page {page_number} was reached twice during traversal")
        self.page_number = page_number


class TreeDepthExceeded(TraversalError):
    def __init__(self, page_number: int, depth: int):
        super().__init__(f"Tree depth {depth} exceeded at page {page_number}")
        self.page_number = page_number
        self.depth = depth
