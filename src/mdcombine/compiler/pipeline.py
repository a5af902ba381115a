"""Combination engine: templates + source pool → resolved output documents."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from mdcombine.compiler.resolution import (
    MAX_RESOLUTION_PASSES,
    Degraded,
    DirectiveResolver,
    Resolved,
    TemplateOutcome,
)
from mdcombine.models.document import Document
from mdcombine.models.errors import IssueKind, ValidationIssue
from mdcombine.parser.pool import SourcePool

logger = logging.getLogger("mdcombine.engine")


def resolution_cap_issue(
    template: Document, max_passes: int, outcome: Resolved | None = None
) -> ValidationIssue:
    if outcome is not None and outcome.passes < max_passes:
        limit = f"Maximum content length reached after {outcome.passes} resolution passes"
    else:
        limit = f"Maximum resolution passes ({max_passes}) reached"
    return ValidationIssue(
        kind=IssueKind.RESOLUTION_CAP,
        message=(
            f"[{template.name}] {limit}. "
            f"This might indicate circular references in insert directives."
        ),
        source_file=template.path,
        template=template.path,
    )


@dataclass
class BuildReport:
    """Everything one build produced, in template input order."""

    documents: list[Document] = field(default_factory=list)
    outcomes: list[TemplateOutcome] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def degraded(self) -> list[Degraded]:
        return [o for o in self.outcomes if isinstance(o, Degraded)]


class CombinationEngine:
    """Resolves insert directives for a batch of templates.

    Stateless between calls: the source pool and resolvers are built per
    invocation, so independent batches may be built concurrently.
    """

    def __init__(
        self, max_passes: int = MAX_RESOLUTION_PASSES, max_length: int | None = None
    ) -> None:
        self._max_passes = max_passes
        self._max_length = max_length

    def build(self, templates: Iterable[Document], sources: Iterable[Document]) -> list[Document]:
        """Resolve every template; one output document per template."""
        return self.build_report(templates, sources).documents

    def build_report(
        self, templates: Iterable[Document], sources: Iterable[Document]
    ) -> BuildReport:
        template_list = list(templates)
        pool = SourcePool(sources)

        logger.info(
            "Building documentation for %d templates using %d source documents",
            len(template_list), len(pool),
        )
        if len(pool):
            logger.debug("Available source documents: %s", ", ".join(pool.names))
        else:
            logger.debug("No source documents provided")

        report = BuildReport()
        for template in template_list:
            outcome = self.resolve_template(template, pool)
            report.outcomes.append(outcome)
            report.documents.append(template.as_output(outcome.content))
            if isinstance(outcome, Resolved):
                report.errors.extend(self._missing_issues(template, outcome))
                if outcome.capped:
                    report.warnings.append(
                        resolution_cap_issue(template, self._max_passes, outcome)
                    )

        logger.info(
            "Documentation building completed. Processed %d templates (%d degraded)",
            len(report.documents), len(report.degraded),
        )
        return report

    def resolve_template(self, template: Document, pool: SourcePool) -> TemplateOutcome:
        """Resolve one template, turning any unexpected failure into ``Degraded``."""
        logger.debug("Processing template: %s", template.path)
        try:
            outcome = DirectiveResolver(
                pool, self._max_passes, max_length=self._max_length
            ).resolve(template)
        except Exception as exc:
            logger.error("Error processing template: %s", template.path, exc_info=exc)
            return Degraded(content=template.content, reason=str(exc) or type(exc).__name__)

        for name in outcome.missing:
            logger.warning(
                "Source document not found for insert directive: %s in template %s",
                name, template.path,
            )
        if outcome.capped:
            logger.warning(
                "Maximum iterations reached while processing template %s. "
                "This might indicate circular references in insert directives.",
                template.path,
            )
        return outcome

    @staticmethod
    def _missing_issues(template: Document, outcome: Resolved) -> list[ValidationIssue]:
        return [
            ValidationIssue(
                kind=IssueKind.REFERENCE_ERROR,
                message=f"[{template.name}] Source document not found: '{name}'",
                directive_target=name,
                source_file=template.path,
                template=template.path,
            )
            for name in dict.fromkeys(outcome.missing)
        ]
