class CorrelatorError(Exception):
    """Base class for errors raised while analysing two datasets."""


class ParseError(CorrelatorError):
    pass


class MissingFieldError(ParseError):
    def __init__(self, field: str, dataset_name: str | None = None):
        self.field = field
        self.dataset_name = dataset_name
        where = f" in {dataset_name}" if dataset_name else ""
        super().__init__(f'Field "{field}" was not found{where}.')


class LengthMismatchError(CorrelatorError, ValueError):
    pass


class InsufficientDataError(CorrelatorError):
    pass


class UndefinedCorrelationError(CorrelatorError):
    pass


class ExternalServiceError(CorrelatorError):
    pass
