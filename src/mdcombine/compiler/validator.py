"""Directive validation: malformed directives, missing sources, cycles, collisions."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Iterable

from mdcombine.compiler.pipeline import resolution_cap_issue
from mdcombine.compiler.resolution import MAX_RESOLUTION_PASSES, DirectiveResolver
from mdcombine.models.document import OUTPUT_EXTENSION, Document, normalize_key, with_extension
from mdcombine.models.errors import IssueKind, ValidationIssue, ValidationResult
from mdcombine.parser.grammar import GRAMMAR, Directive, DirectiveGrammar, line_at, line_number_at
from mdcombine.parser.pool import SourcePool

logger = logging.getLogger("mdcombine.validator")


class DirectiveValidator:
    """Reports problems the combination engine would run into, without building.

    Uses the engine's grammar and source lookup, so a reference the validator
    flags as missing is exactly one the engine replaces with a missing-source
    marker.
    """

    def __init__(
        self,
        max_passes: int = MAX_RESOLUTION_PASSES,
        grammar: DirectiveGrammar = GRAMMAR,
        max_length: int | None = None,
    ) -> None:
        self._max_passes = max_passes
        self._grammar = grammar
        self._max_length = max_length

    def validate(
        self, templates: Iterable[Document], sources: Iterable[Document]
    ) -> ValidationResult:
        template_list = list(templates)
        pool = SourcePool(sources)
        logger.info("Validating %d template documents", len(template_list))

        errors: list[ValidationIssue] = []
        warnings: list[ValidationIssue] = []
        outputs: dict[str, Document] = {}
        valid_files = 0

        for template in template_list:
            logger.debug("Validating template: %s", template.path)
            template_errors, template_warnings = self._validate_template(template, pool)

            collision = self._check_output_collision(template, outputs)
            if collision is not None:
                template_warnings.append(collision)

            if not template_errors:
                valid_files += 1
                logger.debug("Template %s is valid", template.path)
            errors.extend(template_errors)
            warnings.extend(template_warnings)

        logger.info(
            "Validation completed for all templates. Found %d errors and %d warnings",
            len(errors), len(warnings),
        )
        return ValidationResult(
            errors=tuple(errors),
            warnings=tuple(warnings),
            valid_files_count=valid_files,
        )

    # -- per template --------------------------------------------------------

    def _validate_template(
        self, template: Document, pool: SourcePool
    ) -> tuple[list[ValidationIssue], list[ValidationIssue]]:
        content = template.content
        if not content:
            return [], []

        # (offset, is_error, issue), sorted into document order below
        findings: list[tuple[int, bool, ValidationIssue]] = []
        included: list[Document] = []
        seen_texts: set[str] = set()

        def _issue(kind: IssueKind, message: str, offset: int, target: str | None) -> ValidationIssue:
            return ValidationIssue(
                kind=kind,
                message=f"[{template.name}] {message}",
                directive_target=target,
                source_file=template.path,
                line_number=line_number_at(content, offset),
                source_context=line_at(content, offset).strip(),
                template=template.path,
            )

        for tag in self._grammar.find_malformed_tags(content):
            findings.append(
                (tag.start, True, _issue(IssueKind.STRUCTURAL_ERROR, tag.reason, tag.start, tag.text))
            )

        for directive in self._grammar.find(content):
            if directive.is_malformed:
                findings.append(
                    (
                        directive.start,
                        True,
                        _issue(
                            IssueKind.STRUCTURAL_ERROR,
                            _malformed_message(directive),
                            directive.start,
                            directive.text,
                        ),
                    )
                )
                continue

            if directive.legacy:
                findings.append(
                    (
                        directive.start,
                        False,
                        _issue(
                            IssueKind.LEGACY_SYNTAX,
                            f"Legacy MarkDownExtension directive syntax, "
                            f"use '<insert {directive.name}>' instead",
                            directive.start,
                            directive.name,
                        ),
                    )
                )

            source = pool.lookup(directive.name, template.path)
            if source is None:
                findings.append(
                    (
                        directive.start,
                        True,
                        _issue(
                            IssueKind.REFERENCE_ERROR,
                            f"Source document not found: '{directive.name}'",
                            directive.start,
                            directive.name,
                        ),
                    )
                )
                continue

            included.append(source)
            if directive.text in seen_texts:
                findings.append(
                    (
                        directive.start,
                        False,
                        _issue(
                            IssueKind.DUPLICATE_DIRECTIVE,
                            f"Duplicate insert directive found: '{directive.text}'",
                            directive.start,
                            directive.name,
                        ),
                    )
                )
            seen_texts.add(directive.text)

        findings.sort(key=lambda finding: finding[0])
        errors = [issue for _, is_error, issue in findings if is_error]
        warnings = [issue for _, is_error, issue in findings if not is_error]

        errors.extend(self._nested_issues(template, included, pool))

        outcome = DirectiveResolver(
            pool, self._max_passes, self._grammar, max_length=self._max_length
        ).resolve(template)
        if outcome.capped:
            warnings.append(resolution_cap_issue(template, self._max_passes, outcome))

        return errors, warnings

    def _nested_issues(
        self, template: Document, included: list[Document], pool: SourcePool
    ) -> list[ValidationIssue]:
        """Structural and reference errors inside sources reachable from ``template``.

        A source first reached at depth ``d`` has its directives expanded in
        pass ``d + 1``; directives of sources beyond the resolution cap are not
        followed. Malformed legacy tags are reported for every reached source,
        since the engine copies them into the output unchanged.
        """
        issues: list[ValidationIssue] = []
        visited: set[str] = set()
        queue: deque[tuple[Document, int]] = deque()
        for source in included:
            if source.key not in visited:
                visited.add(source.key)
                queue.append((source, 1))

        while queue:
            source, depth = queue.popleft()
            for tag in self._grammar.find_malformed_tags(source.content):
                issues.append(
                    _nested_issue(
                        template,
                        source,
                        IssueKind.STRUCTURAL_ERROR,
                        tag.reason,
                        tag.start,
                        tag.text,
                    )
                )
            if depth >= self._max_passes:
                continue
            for directive in self._grammar.find(source.content):
                if directive.is_malformed:
                    issues.append(
                        _nested_issue(
                            template,
                            source,
                            IssueKind.STRUCTURAL_ERROR,
                            _malformed_message(directive),
                            directive.start,
                            directive.text,
                        )
                    )
                    continue
                target = pool.lookup(directive.name, template.path)
                if target is None:
                    issues.append(
                        _nested_issue(
                            template,
                            source,
                            IssueKind.REFERENCE_ERROR,
                            f"Source document not found: '{directive.name}'",
                            directive.start,
                            directive.name,
                        )
                    )
                elif target.key not in visited:
                    visited.add(target.key)
                    queue.append((target, depth + 1))
        issues.sort(key=lambda issue: (issue.source_file or "", issue.line_number or 0))
        return issues

    @staticmethod
    def _check_output_collision(
        template: Document, outputs: dict[str, Document]
    ) -> ValidationIssue | None:
        """Warn when a different template already produces the same output name.

        The engine names outputs after the template name, so templates in
        different folders can still collide.
        """
        output_name = with_extension(template.name, OUTPUT_EXTENSION)
        key = normalize_key(output_name)
        previous = outputs.get(key)
        if previous is None:
            outputs[key] = template
            return None
        if previous.path == template.path:
            return None
        return ValidationIssue(
            kind=IssueKind.OUTPUT_COLLISION,
            message=(
                f"[{template.name}] Output '{output_name}' is also produced by "
                f"template '{previous.path}'"
            ),
            directive_target=None,
            source_file=template.path,
            template=template.path,
        )


def _nested_issue(
    template: Document,
    source: Document,
    kind: IssueKind,
    message: str,
    offset: int,
    target: str | None,
) -> ValidationIssue:
    return ValidationIssue(
        kind=kind,
        message=f"[{template.name}] {message} (included via '{source.name}')",
        directive_target=target,
        source_file=source.path,
        line_number=line_number_at(source.content, offset),
        source_context=line_at(source.content, offset).strip(),
        template=template.path,
    )


def _malformed_message(directive: Directive) -> str:
    if not directive.name:
        return "Insert directive is missing a source name"
    return f"Insert directive contains invalid filename characters: '{directive.name}'"
