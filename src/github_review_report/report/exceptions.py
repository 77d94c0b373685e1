"""Report exceptions."""


class ReportError(Exception):
    """A report stopped on an unrecoverable error.

    Carries the repository and item (PR number, page, ...) that was being
    processed so the operator knows where the run stopped.
    """

    def __init__(
        self,
        message: str,
        *,
        repository: str | None = None,
        item: int | str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.repository = repository
        self.item = item

    def __str__(self) -> str:
        where = self.repository or ""
        if self.item is not None:
            where = f"{where} #{self.item}" if where else f"#{self.item}"
        return f"{where}: {self.message}" if where else self.message
