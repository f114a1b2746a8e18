"""
Tokenizer — Turn template text into a lazy stream of positioned tokens.

Supported tags:
- Variables: {{name}} (escaped), {{{name}}} and {{&name}} (unescaped)
- Dotted names: {{person.full_name}}, implicit iterator: {{.}}
- Sections: {{#items}} ... {{/items}}
- Inverted sections: {{^items}} ... {{/items}}
- Comments: {{! comment }} (produce no token)

Literal text is split around the characters that need escaping inside a
generated string literal (newline, carriage return, double quote and
backslash); each of those becomes a SPECIAL_CHARACTER token.
"""

from __future__ import annotations

import re
from typing import Iterator

from stache.core.errors import TemplateSyntaxError
from stache.core.logging import LogChannel, get_logger
from stache.ir.enums import TokenKind
from stache.ir.tokens import Position, PositionedToken

SPECIAL_CHARACTERS = "\n\r\"\\"

_SPECIAL_RE = re.compile(r'[\n\r"\\]')
_NAME_RE = re.compile(r"^(\.|[A-Za-z_]\w*(\.[A-Za-z_]\w*)*)$")

_SIGILS = {
    "#": TokenKind.SECTION_OPEN,
    "^": TokenKind.INVERTED_SECTION_OPEN,
    "/": TokenKind.SECTION_CLOSE,
    "&": TokenKind.UNESCAPED_VARIABLE,
}

log = get_logger(LogChannel.TOKENIZE)


def tokenize(source_name: str, text: str) -> Iterator[PositionedToken]:
    """
    Lazily tokenize a template.

    The stream is finite, always ends with an END_OF_FILE token and cannot
    be restarted; tokenize again to get a fresh one.

    Raises:
        TemplateSyntaxError: On an unterminated tag or an invalid name,
            when the scanner reaches it
    """
    return _Scanner(source_name, text).tokens()


class _Scanner:
    def __init__(self, source_name: str, text: str) -> None:
        self.source_name = source_name
        self.text = text
        self.offset = 0
        self.line = 1
        self.column = 1
        self.count = 0

    def position(self) -> Position:
        return Position(
            source_name=self.source_name,
            line=self.line,
            column=self.column,
            offset=self.offset,
        )

    def tokens(self) -> Iterator[PositionedToken]:
        text = self.text
        while self.offset < len(text):
            start = text.find("{{", self.offset)
            if start < 0:
                yield from self._literal(len(text))
                break
            yield from self._literal(start)
            yield from self._tag()

        log.verbose("template_tokenized", source=self.source_name, tokens=self.count)
        yield PositionedToken.end_of_file(self.position())

    def _emit(self, kind: TokenKind, value: str, end: int) -> PositionedToken:
        token = PositionedToken(kind=kind, value=value, position=self.position())
        self._consume(end)
        self.count += 1
        return token

    def _consume(self, end: int) -> None:
        segment = self.text[self.offset:end]
        newlines = segment.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(segment) - segment.rfind("\n")
        else:
            self.column += len(segment)
        self.offset = end

    def _literal(self, end: int) -> Iterator[PositionedToken]:
        while self.offset < end:
            match = _SPECIAL_RE.search(self.text, self.offset, end)
            if match is None:
                yield self._emit(TokenKind.TEXT, self.text[self.offset:end], end)
                return
            if match.start() > self.offset:
                yield self._emit(TokenKind.TEXT, self.text[self.offset:match.start()], match.start())
            yield self._emit(TokenKind.SPECIAL_CHARACTER, match.group(0), match.end())

    def _tag(self) -> Iterator[PositionedToken]:
        text = self.text
        if text.startswith("{{{", self.offset):
            close = text.find("}}}", self.offset + 3)
            if close < 0:
                raise TemplateSyntaxError("Unclosed {{{ tag", position=self.position())
            name = self._checked_name(text[self.offset + 3:close])
            yield self._emit(TokenKind.UNESCAPED_VARIABLE, name, close + 3)
            return

        close = text.find("}}", self.offset + 2)
        if close < 0:
            raise TemplateSyntaxError("Unclosed {{ tag", position=self.position())
        content = text[self.offset + 2:close].strip()

        if content.startswith("!"):
            self._consume(close + 2)
            return

        kind = TokenKind.VARIABLE
        if content[:1] in _SIGILS:
            kind = _SIGILS[content[0]]
            content = content[1:]
        yield self._emit(kind, self._checked_name(content), close + 2)

    def _checked_name(self, raw: str) -> str:
        name = raw.strip()
        if not name:
            raise TemplateSyntaxError("Empty tag name", position=self.position())
        if not _NAME_RE.match(name):
            raise TemplateSyntaxError(f"Invalid tag name: {name!r}", position=self.position())
        return name
