"""Exceptions raised by the extractor. Scanning itself never fails."""


class JfifExtractError(Exception):
    """Base class for all extractor errors."""


class InputError(JfifExtractError):
    """The input could not be opened, sized, mapped or read."""

    def __init__(self, path: str, stage: str, cause: Exception):
        self.path = path
        self.stage = stage          # "open", "stat", "map" or "read"
        self.cause = cause
        super().__init__(f"cannot {stage} {path}: {cause}")


class OutputDirError(JfifExtractError):
    """The output directory is unusable."""

    def __init__(self, path: str, message: str, not_a_directory: bool = False):
        self.path = path
        self.not_a_directory = not_a_directory
        super().__init__(f"'{path}': {message}")


class SinkError(JfifExtractError):
    """A block sink refused to continue."""


class TooManyBlocksError(SinkError):
    """A block index went past the sink's configured maximum."""

    def __init__(self, index: int, max_index: int):
        self.index = index
        self.max_index = max_index
        self.summary = None         # Partial run summary, set by extract_file
        super().__init__(
            f"block #{index} exceeds the limit of {max_index}; "
            f"refusing to handle more blocks"
        )
