class BukuKasError(Exception):
    pass


class ValidationError(BukuKasError):
    """Draft or form input rejected; nothing was written."""

    def __init__(self, problems):
        if isinstance(problems, str):
            problems = [problems]
        self.problems = list(problems)
        super().__init__("; ".join(self.problems))


class ReconciliationMismatch(BukuKasError):
    """Nota line items do not add up to the pending disbursement."""

    def __init__(self, expected: int, actual: int):
        self.expected = expected
        self.actual = actual
        self.difference = expected - actual
        super().__init__(
            f"Total Nota ({actual}) tidak sesuai dengan input awal ({expected}), selisih {self.difference}"
        )


class InvalidEntry(BukuKasError):
    pass


class ImportParseError(BukuKasError):
    def __init__(self, message: str, imported: int = 0, skipped: int = 0):
        self.imported = imported
        self.skipped = skipped
        super().__init__(message)


class ProtocolStateError(BukuKasError):
    pass


class EntryNotFound(BukuKasError, KeyError):
    def __init__(self, kind: str, entry_id: str):
        self.kind = kind
        self.entry_id = entry_id
        super().__init__(f"{kind} {entry_id} not found")

    def __str__(self) -> str:
        return self.args[0]
