"""Validator: checks a document tree against a built schema.

Validation accumulates every violation it can detect. Only an undeclared
root element stops it early. Diagnostics carry the source position of the
node they concern when the tree came from the parser.
"""

from typing import List, Optional, Tuple

from xml_helper.schema.model import (
    ComplexTypeDef,
    ElementDef,
    Restriction,
    Schema,
    SimpleTypeDef,
)
from xml_helper.shared import ErrorCode, ValidationError, get_logger, make_error
from xml_helper.tree import Node, is_namespace_declaration
from xml_helper.validation.facets import check_facets
from xml_helper.validation.types import (
    BuiltinType,
    TypeKind,
    is_lexically_valid,
    resolve_type,
)


class _ValidationRun:
    """Diagnostics collected by one ``validate`` call."""

    def __init__(self) -> None:
        self.errors: List[ValidationError] = []
        self.elements_checked = 0

    def report(self, code: ErrorCode, message: str, node: Optional[Node] = None) -> None:
        line = node.line if node is not None else None
        column = node.column if node is not None else None
        self.errors.append(make_error(code, message, line, column))


class Validator:
    """Validates document trees against one immutable ``Schema``.

    The instance holds no per-call state, so ``validate`` may be called
    repeatedly (and concurrently) with identical results for identical input.

    Examples:
        >>> validator = compile_validator(schema)
        >>> errors = validator.validate(parse_document(text).node)
    """

    def __init__(self, schema: Schema, correlation_id: Optional[str] = None) -> None:
        """Initialize the validator.

        Args:
            schema: Schema to validate against
            correlation_id: Optional correlation ID for request tracking
        """
        self.schema = schema
        self.correlation_id = correlation_id
        self.logger = get_logger(__name__, correlation_id, "validator")

    def validate(self, node: Node) -> List[ValidationError]:
        """Validate a document tree.

        Args:
            node: Root node of the document

        Returns:
            All diagnostics found, empty when the document is valid
        """
        run = _ValidationRun()
        with self.logger.timed("validate", root=node.name) as summary:
            definition = self.schema.get_element(node.name)
            if definition is None:
                run.errors.append(make_error(
                    ErrorCode.ELEMENT_NOT_FOUND,
                    f"Root element '{node.name}' is not declared in the schema",
                ))
            else:
                self._run_guarded(node, definition, run)

            summary["elements_checked"] = run.elements_checked
            summary["error_count"] = len(run.errors)

        self.logger.info(
            "Validation completed",
            extra={"root": node.name, "error_count": len(run.errors)},
        )
        return run.errors

    def validate_element(self, node: Node, definition: ElementDef) -> List[ValidationError]:
        """Validate ``node`` against a specific declaration, skipping root lookup."""
        run = _ValidationRun()
        self._run_guarded(node, definition, run)
        return run.errors

    def _run_guarded(self, node: Node, definition: ElementDef, run: _ValidationRun) -> None:
        try:
            self._validate_element(node, definition, run)
        except RecursionError:
            self.logger.exception("Document nesting too deep to validate")
            run.report(
                ErrorCode.INVALID_CONTENT,
                f"Element '{node.name}' is nested too deeply to validate",
                node,
            )

    def _validate_element(self, node: Node, definition: ElementDef, run: _ValidationRun) -> None:
        run.elements_checked += 1

        if node.name != definition.name:
            run.report(
                ErrorCode.ELEMENT_MISMATCH,
                f"Expected element '{definition.name}' but found '{node.name}'",
                node,
            )
            return

        resolved = resolve_type(self.schema, definition.type_name)

        if resolved.kind is TypeKind.BUILTIN:
            self._validate_builtin(node, definition, resolved.definition, run)
        elif resolved.kind is TypeKind.COMPLEX:
            self._validate_attributes(node, resolved.definition, run)
            self._validate_particles(node, resolved.definition, run)
        elif resolved.kind is TypeKind.SIMPLE:
            self._validate_simple(node, resolved.definition, run)
        elif resolved.kind is TypeKind.INLINE:
            self._apply_facets(node, node.text_content, definition.restrictions, run)
        else:
            # Unknown type references are accepted without content checks
            self.logger.debug(
                "Unresolved type reference",
                extra={"element": node.name, "type_name": definition.type_name},
            )

    def _validate_builtin(
        self,
        node: Node,
        definition: ElementDef,
        builtin: BuiltinType,
        run: _ValidationRun,
    ) -> None:
        if node.element_children():
            run.report(
                ErrorCode.INVALID_CONTENT,
                f"Element '{node.name}' of type '{definition.type_name}' "
                f"cannot contain child elements",
                node,
            )
            return

        text = node.text_content
        if not builtin.is_valid(text):
            run.report(
                ErrorCode.INVALID_ELEMENT_VALUE,
                f"Value '{text}' of element '{node.name}' is not a valid "
                f"{builtin.value}",
                node,
            )
        self._apply_facets(node, text, definition.restrictions, run)

    def _validate_simple(
        self, node: Node, simple_type: SimpleTypeDef, run: _ValidationRun
    ) -> None:
        text = node.text_content
        if not is_lexically_valid(simple_type.base_type, text):
            run.report(
                ErrorCode.INVALID_SIMPLE_TYPE_VALUE,
                f"Value '{text}' of element '{node.name}' is not a valid "
                f"{simple_type.base_type} (base of '{simple_type.name}')",
                node,
            )
        self._apply_facets(node, text, simple_type.restrictions, run)

    def _validate_attributes(
        self, node: Node, complex_type: ComplexTypeDef, run: _ValidationRun
    ) -> None:
        for declared in complex_type.attributes:
            if declared.required and declared.name not in node.attributes:
                run.report(
                    ErrorCode.MISSING_REQUIRED_ATTRIBUTE,
                    f"Element '{node.name}' is missing required attribute '{declared.name}'",
                    node,
                )

        for name, value in node.attributes.items():
            if is_namespace_declaration(name):
                continue

            declared = complex_type.find_attribute(name)
            if declared is None:
                run.report(
                    ErrorCode.UNEXPECTED_ATTRIBUTE,
                    f"Attribute '{name}' is not allowed on element '{node.name}'",
                    node,
                )
            elif declared.fixed_value is not None and value != declared.fixed_value:
                run.report(
                    ErrorCode.FIXED_VALUE_VIOLATION,
                    f"Attribute '{name}' on element '{node.name}' must be "
                    f"'{declared.fixed_value}' but is '{value}'",
                    node,
                )
            elif not is_lexically_valid(declared.type_name, value):
                run.report(
                    ErrorCode.INVALID_ATTRIBUTE_VALUE,
                    f"Value '{value}' of attribute '{name}' on element '{node.name}' "
                    f"is not a valid {declared.type_name}",
                    node,
                )

    def _validate_particles(
        self, node: Node, complex_type: ComplexTypeDef, run: _ValidationRun
    ) -> None:
        for particle in complex_type.elements:
            matches = node.find_children(particle.name)
            count = len(matches)

            if count < particle.min_occurs:
                run.report(
                    ErrorCode.MIN_OCCURS_VIOLATION,
                    f"Element '{particle.name}' occurs {count} time(s) in "
                    f"'{node.name}', minimum is {particle.min_occurs}",
                    node,
                )
            if not particle.is_unbounded and count > particle.max_occurs:
                run.report(
                    ErrorCode.MAX_OCCURS_VIOLATION,
                    f"Element '{particle.name}' occurs {count} time(s) in "
                    f"'{node.name}', maximum is {particle.max_occurs}",
                    node,
                )

            for match in matches:
                self._validate_element(match, particle, run)

        declared = {particle.name for particle in complex_type.elements}
        for child in node.element_children():
            if child.name not in declared:
                run.report(
                    ErrorCode.UNEXPECTED_ELEMENT,
                    f"Element '{child.name}' is not allowed in '{node.name}'",
                    child,
                )

    def _apply_facets(
        self,
        node: Node,
        text: str,
        facets: Tuple[Restriction, ...],
        run: _ValidationRun,
    ) -> None:
        for violation in check_facets(text, facets, node.name):
            run.report(violation.code, violation.message, node)


def compile_validator(schema: Schema, correlation_id: Optional[str] = None) -> Validator:
    """Create a reusable validator for ``schema``."""
    return Validator(schema, correlation_id)
