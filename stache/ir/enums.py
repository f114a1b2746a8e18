"""
IR Enums — Token kinds, type classifications and section shapes.

No stringly-typed constants scattered across the compiler.
"""

from enum import Enum


class TokenKind(str, Enum):
    """Kinds of positioned tokens produced by the tokenizer."""

    TEXT = "text"                                    # Literal run
    SPECIAL_CHARACTER = "special_character"          # Newline, quote, backslash
    VARIABLE = "variable"                            # {{name}}
    UNESCAPED_VARIABLE = "unescaped_variable"        # {{{name}}} or {{&name}}
    SECTION_OPEN = "section_open"                    # {{#name}}
    INVERTED_SECTION_OPEN = "inverted_section_open"  # {{^name}}
    SECTION_CLOSE = "section_close"                  # {{/name}}
    END_OF_FILE = "end_of_file"


class TypeClassification(str, Enum):
    """
    Rendering category of a declared member type.

    Decides how a variable is written:
    - NUMERIC, BOOLEAN: converted with str() / true-false, never escaped
    - CHARACTER, STRING: written as-is or HTML-escaped
    - RENDERABLE: the value renders itself into the writer
    - EXCEPTION, OBJECT: default string conversion
    """

    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    CHARACTER = "character"
    STRING = "string"
    RENDERABLE = "renderable"
    EXCEPTION = "exception"
    OBJECT = "object"


class SectionShape(str, Enum):
    """Control flow a section compiles to, decided by the member's type."""

    GUARD = "guard"          # bool: if value
    OPTIONAL = "optional"    # X | None: if value is not None, binds X
    ITERATION = "iteration"  # Sequence[X]: for item in value, binds X
    OBJECT = "object"        # anything else: if value, binds the value
