class ExpanderError(RuntimeError):
    pass


class InvalidImageError(ExpanderError):
    pass


class UploadTooLargeError(InvalidImageError):
    pass


class CompositionError(ExpanderError):
    pass


class DescriptionFailed(ExpanderError):
    pass


class ExpansionFailed(ExpanderError):
    pass


class SessionStateError(ExpanderError):
    pass


class SessionNotFoundError(ExpanderError):
    pass
