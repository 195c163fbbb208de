"""Load raw rule sources into a validated document set."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import Iterable, Optional

from rule_resolver.errors import DuplicateDocumentError, MalformedDocumentError, UnknownReferenceError
from rule_resolver.resolution.references import ReferenceResolver
from rule_resolver.rules.models import LoadReport, RawRuleSource, RuleDocument
from rule_resolver.rules.parser import parse_rule

logger = logging.getLogger(__name__)


def _check_duplicates(sources: list[RawRuleSource]) -> None:
    seen: dict[str, Optional[Path]] = {}
    for source in sources:
        if source.id in seen:
            raise DuplicateDocumentError(source.id, paths=[seen[source.id], source.source_path])
        seen[source.id] = source.source_path


def _check_cycles(documents: dict[str, RuleDocument]) -> None:
    """Raise on a reference cycle among parsed documents, ignoring unknown ids."""
    known = {
        document_id: replace(
            document,
            references=tuple(reference for reference in document.references if reference in documents),
        )
        for document_id, document in documents.items()
    }
    ReferenceResolver(known).check()


def _exclude_dangling(
    documents: dict[str, RuleDocument], warnings: list[Exception]
) -> dict[str, RuleDocument]:
    """Drop documents referencing ids that are not loaded, until stable."""
    remaining = dict(documents)
    changed = True
    while changed:
        changed = False
        for document_id in sorted(remaining):
            document = remaining[document_id]
            missing = [reference for reference in document.references if reference not in remaining]
            if missing:
                error = UnknownReferenceError(document_id, missing[0], path=document.source_path)
                logger.warning("Excluding rule document: %s", error)
                warnings.append(error)
                del remaining[document_id]
                changed = True
    return remaining


def load_documents(sources: Iterable[RawRuleSource]) -> LoadReport:
    """Parse sources into documents.

    Malformed documents are excluded and reported in ``warnings``. Duplicate
    ids and reference cycles abort the load. Cycles are detected before
    dangling references are excluded, so a cycle is fatal even when one of
    its members also references an unknown id.
    """
    source_list = list(sources)
    _check_duplicates(source_list)

    warnings: list[Exception] = []
    parsed: dict[str, RuleDocument] = {}
    for source in source_list:
        try:
            parsed[source.id] = parse_rule(source)
        except MalformedDocumentError as exc:
            logger.warning("Excluding rule document: %s", exc)
            warnings.append(exc)

    _check_cycles(parsed)
    documents = _exclude_dangling(parsed, warnings)

    logger.debug("Loaded %d rule documents (%d excluded)", len(documents), len(warnings))
    return LoadReport(
        documents=[documents[document_id] for document_id in sorted(documents)],
        warnings=warnings,
    )
