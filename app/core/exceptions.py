class InvalidArgumentError(ValueError):
    """A request referred to something that does not exist or would clash with existing data."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(InvalidArgumentError):
    pass


class DuplicateKeyError(InvalidArgumentError):
    pass
