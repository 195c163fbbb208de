from pathlib import Path
from typing import Optional, Sequence


class RuleResolverError(Exception):
    """Base error for rule loading and resolution."""


class MalformedDocumentError(RuleResolverError):
    def __init__(self, document_id: str, detail: str, path: Optional[Path] = None) -> None:
        self.document_id = document_id
        self.detail = detail
        self.path = path
        location = f" ({path})" if path is not None else ""
        super().__init__(f"Malformed rule document '{document_id}'{location}: {detail}")


class UnknownReferenceError(MalformedDocumentError):
    def __init__(self, document_id: str, reference: str, path: Optional[Path] = None) -> None:
        self.reference = reference
        super().__init__(document_id, f"references unknown document '{reference}'", path=path)


class DuplicateDocumentError(RuleResolverError):
    def __init__(self, document_id: str, paths: Sequence[Optional[Path]] = ()) -> None:
        self.document_id = document_id
        self.paths = tuple(paths)
        locations = ", ".join(str(path) for path in self.paths if path is not None)
        suffix = f" ({locations})" if locations else ""
        super().__init__(f"Duplicate rule document id '{document_id}'{suffix}")


class CyclicReferenceError(RuleResolverError):
    def __init__(self, cycle: Sequence[str]) -> None:
        self.cycle = tuple(cycle)
        super().__init__(f"Cyclic rule reference: {' -> '.join(self.cycle)}")


class ResolutionError(RuleResolverError):
    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"{message}{detail}")


class InvalidConfigError(RuleResolverError):
    def __init__(self, path: Path, detail: str) -> None:
        self.path = path
        self.detail = detail
        super().__init__(f"Invalid config ({detail}): {path}")
