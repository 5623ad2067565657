"""
Error taxonomy for minilink.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from MinilinkError.

Programming errors and bugs should NOT inherit from MinilinkError;
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional

from .location import SourceLocation


class MinilinkError(Exception):
    """
    Base class for all user-facing errors in minilink.

    These errors indicate problems that the user can fix:
    broken templates, unknown attributes, unreadable files, etc.
    """
    pass


class LocatedError(MinilinkError):
    """
    Error bound to a place in the template source.

    The location may be attached after construction: evaluation errors are
    raised deep inside the evaluator, which knows nothing about the template,
    and the renderer fills in the directive location on the way up.
    """

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    @property
    def position(self) -> Optional[int]:
        return self.location.position if self.location else None

    @property
    def line(self) -> Optional[int]:
        return self.location.line if self.location else None

    @property
    def column(self) -> Optional[int]:
        return self.location.column if self.location else None

    def attach_location(self, location: SourceLocation) -> None:
        """Binds the error to a template location unless it already has one."""
        if self.location is None:
            self.location = location

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f"{self.message} at {self.location.line}:{self.location.column}"


# ---- Syntax errors (lexer, document parser, expression parser) ----

class TemplateSyntaxError(LocatedError):
    """Template text cannot be turned into a document tree."""
    pass


class MalformedDirective(TemplateSyntaxError):
    """Unterminated or malformed `{% ... %}` / `{# ... #}` marker."""
    pass


class UnterminatedConditional(TemplateSyntaxError):
    """An `if` block reaches the end of input without `endif`."""
    pass


class UnmatchedDirective(TemplateSyntaxError):
    """`elif`/`else`/`endif` outside of any `if` block."""
    pass


class DuplicateElse(TemplateSyntaxError):
    """A second `else` in the same `if` block."""
    pass


class ElseIfAfterElse(TemplateSyntaxError):
    """`elif` following `else` in the same `if` block."""
    pass


class ExpressionSyntaxError(TemplateSyntaxError):
    """
    Malformed predicate payload.

    `payload_position` is the offset inside the payload; `location`, once
    attached, points into the template.
    """

    def __init__(self, message: str, payload_position: int, location: Optional[SourceLocation] = None):
        super().__init__(message, location)
        self.payload_position = payload_position

    def __str__(self) -> str:
        base = f"{self.message} (payload offset {self.payload_position})"
        if self.location is None:
            return base
        return f"{base} at {self.location.line}:{self.location.column}"


# ---- Evaluation errors ----

class EvaluationError(LocatedError):
    """Semantic error raised while evaluating a predicate."""
    pass


class UnknownFunction(EvaluationError):
    """Call of a function that is not part of the predicate language."""

    def __init__(self, name: str, location: Optional[SourceLocation] = None):
        super().__init__(f"Unknown function '{name}'", location)
        self.name = name


class UnknownAttribute(EvaluationError):
    """Dotted path that does not exist in the configuration context."""

    def __init__(self, path: str, location: Optional[SourceLocation] = None):
        super().__init__(f"Unknown attribute '{path}'", location)
        self.path = path


class TypeMismatch(EvaluationError):
    """Value of the wrong kind passed to a function or used as a condition."""
    pass


# ---- Collaborator errors ----

class TemplateIOError(MinilinkError):
    """Reading the template or writing the rendered output failed."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class ContextConfigError(MinilinkError):
    """Configuration context source (YAML file, overrides) is malformed."""
    pass


class BuildEnvironmentError(MinilinkError):
    """Required build-script environment variable is missing."""
    pass


__all__ = [
    "MinilinkError",
    "LocatedError",
    "TemplateSyntaxError",
    "MalformedDirective",
    "UnterminatedConditional",
    "UnmatchedDirective",
    "DuplicateElse",
    "ElseIfAfterElse",
    "ExpressionSyntaxError",
    "EvaluationError",
    "UnknownFunction",
    "UnknownAttribute",
    "TypeMismatch",
    "TemplateIOError",
    "ContextConfigError",
    "BuildEnvironmentError",
]
