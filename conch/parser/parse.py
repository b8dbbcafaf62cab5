"""High-level parse entrypoint for conch source text."""

from dataclasses import dataclass, field

from conch.ast import Ast
from conch.diagnostics import Diagnostic, collect_diagnostics, has_errors, sort_diagnostics
from conch.lexer import Token
from conch.parser.grammar import parse_source
from conch.parser.options import ParserOptions
from conch.parser.parser import Parser
from conch.parser.token_source import TokenSource


@dataclass(frozen=True, slots=True)
class ParseOutput:
    """Issues plus the (possibly partial) tree.

    `result` is only absent when the input holds nothing but trivia.
    """

    issues: list[Diagnostic]
    result: Ast | None
    tokens: list[Token] = field(default_factory=list, repr=False)

    @property
    def has_errors(self) -> bool:
        return has_errors(self.issues)


def parse(text: str, options: ParserOptions | None = None) -> ParseOutput:
    source = TokenSource(text)
    if source.is_empty():
        return ParseOutput(issues=sort_diagnostics(source.finish()), result=None, tokens=source.all_tokens)

    parser = Parser(source, options=options)
    block = parse_source(parser)
    diagnostics = collect_diagnostics(source.finish(), parser.finish())

    return ParseOutput(
        issues=sort_diagnostics(diagnostics),
        result=Ast(block),
        tokens=source.all_tokens,
    )
