class ListQueryError(Exception):
    """Base class for listquery errors."""


class InvalidListQueryConfig(ListQueryError, ValueError):
    """A ListQueryConfig was declared with inconsistent values.

    Raised when the config is constructed (route-definition time), never
    while translating a request.
    """

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class DefaultSortNotSortable(InvalidListQueryConfig):
    """The default sort key has no column in the sortable allowlist."""

    def __init__(self, key: str):
        super().__init__(f'default sort key "{key}" is not declared in sortable')
        self.key = key


class InvalidLimit(InvalidListQueryConfig):
    """default_limit / max_limit is not a usable page size."""

    def __init__(self, detail: str = "limits must be positive integers"):
        super().__init__(detail)
