"""Parser for the CODE language.

This module implements a two-stage parsing pipeline:

1. **Boundary check**: the program must open with a `BEGIN CODE` line and
   close with an `END CODE` line, each appearing exactly once. Blank lines
   and `#` comment lines around them are allowed. Violations are reported
   with a dedicated message before any grammar parsing happens.

2. **Parsing**: the source is fed into a Lark LALR parser configured with
   the CODE grammar. Newlines and `;` both terminate statements. The
   resulting parse tree is transformed into an abstract syntax tree (AST)
   using a custom transformer.

The `parse_program` function is the public entry point and returns a
`Program` AST node representing the entire source file.
"""

from __future__ import annotations

from typing import List, Tuple
import re

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, VisitError

from .ast import (
    Program, Block, Declarator, Declaration, Assign, IfStmt, WhileStmt,
    CaseClause, SwitchStmt, BreakStmt, DisplayStmt, ScanStmt,
    BinaryOp, UnaryOp, Literal, Ident, NewlineMark,
)
from .errors import CodeSyntaxError
from .types import DeclaredType, Value, INT32_MAX


_BEGIN_LINE = re.compile(r'BEGIN\s+CODE\s*(#.*)?')
_END_LINE = re.compile(r'END\s+CODE\s*(#.*)?')


def check_boundaries(source: str) -> None:
    """Verify that BEGIN CODE and END CODE delimit the program.

    Raises CodeSyntaxError describing the first violation found.
    """
    lines: List[Tuple[int, str]] = []
    for number, raw in enumerate(source.splitlines(), start=1):
        line = raw.strip()
        if not line or line.startswith('#'):
            continue
        lines.append((number, line))

    begins = [number for number, line in lines if _BEGIN_LINE.fullmatch(line)]
    ends = [number for number, line in lines if _END_LINE.fullmatch(line)]

    if not begins and not ends:
        raise CodeSyntaxError('Missing BEGIN CODE and END CODE')
    if not begins:
        raise CodeSyntaxError('Missing BEGIN CODE')
    if not ends:
        raise CodeSyntaxError('Missing END CODE')
    if len(begins) > 1 or begins[0] != lines[0][0]:
        raise CodeSyntaxError('BEGIN CODE must only be at the beginning of the program', begins[-1])
    if len(ends) > 1 or ends[-1] != lines[-1][0]:
        raise CodeSyntaxError('END CODE must only be at the end of the program', ends[0])
    if len(lines) == 2:
        raise CodeSyntaxError('CODE not recognized, cannot be executed')


CODE_GRAMMAR = r"""
    ?start: program
    program: _NL? "BEGIN" "CODE" _NL stmt_list "END" "CODE" _NL?

    stmt_list: (statement _NL)* statement?

    // Statements
    ?statement: declaration
              | assignment
              | if_stmt
              | while_stmt
              | switch_stmt
              | break_stmt
              | display_stmt
              | scan_stmt

    declaration: type_name declarator ("," declarator)*
    declarator: IDENT ("=" expression)?
    !type_name: "INT" | "FLOAT" | "BOOL" | "CHAR" | "STRING"

    assignment: (IDENT "=")+ expression

    if_stmt: "IF" "(" expression ")" _NL? if_block ("ELSE" _NL? (if_stmt | if_block))?
    ?if_block: "BEGIN" "IF" _NL stmt_list "END" "IF" -> keyword_block
             | brace_block

    while_stmt: "WHILE" "(" expression ")" _NL? while_block
    ?while_block: "BEGIN" "WHILE" _NL stmt_list "END" "WHILE" -> keyword_block
                | brace_block

    switch_stmt: "SWITCH" "(" expression ")" _NL? switch_body
    switch_body: "BEGIN" "SWITCH" _NL case_clause* default_clause? "END" "SWITCH"
               | "{" _NL? case_clause* default_clause? "}"
    case_clause: "CASE" expression ":" _NL? stmt_list
    default_clause: "DEFAULT" ":" _NL? stmt_list

    brace_block: "{" _NL? stmt_list "}"

    break_stmt: "BREAK"
    display_stmt: "DISPLAY" ":" expression
    scan_stmt: "SCAN" ":" IDENT ("," IDENT)*

    // Expressions with precedence, lowest first
    ?expression: logical
    ?logical: logical "AND" negation -> and_expr
            | logical "OR" negation -> or_expr
            | negation
    ?negation: "NOT" negation -> not_expr
             | comparison
    ?comparison: comparison COMP_OP sum -> binary
               | sum
    ?sum: sum (PLUS | MINUS | AMP | DOLLAR) product -> binary
        | product
    ?product: product MUL_OP unary -> binary
            | unary
    ?unary: (PLUS | MINUS) unary -> unary_op
          | atom
    ?atom: INT_LIT -> int_literal
         | FLOAT_LIT -> float_literal
         | CHAR_LIT -> char_literal
         | STRING_LIT -> string_literal
         | ESCAPE -> escape_literal
         | DOLLAR -> newline_mark
         | IDENT -> var_ref
         | "(" expression ")"

    // Tokens
    COMP_OP: "==" | "<>" | ">=" | "<=" | ">" | "<"
    MUL_OP: "*" | "/" | "%"
    PLUS: "+"
    MINUS: "-"
    AMP: "&"
    DOLLAR: "$"
    FLOAT_LIT.2: /[0-9]+\.[0-9]+/
    INT_LIT: /[0-9]+/
    CHAR_LIT: /'[^'\n]'/
    STRING_LIT: /"[^"\n]*"/
    ESCAPE: /\[(?:\]|[^\]\n]*)\]/
    IDENT: /[A-Za-z_][A-Za-z0-9_]*/

    // Statement separators. A separator directly before ELSE belongs to the
    // IF statement and is skipped instead.
    _NL: /(?:(?:\r?\n|;)[ \t]*(?:#[^\n]*)?)+(?!(?:[ \t\r\n;]|#[^\n]*)*ELSE\b)/
    _ELSE_GAP.2: /(?:[ \t\r\n;]|#[^\n]*)+(?=ELSE\b)/

    COMMENT: /#[^\n]*/

    %import common.WS_INLINE
    %ignore WS_INLINE
    %ignore COMMENT
    %ignore _ELSE_GAP
"""


CODE_PARSER = Lark(
    CODE_GRAMMAR,
    parser='lalr',
    lexer='contextual',
    propagate_positions=True,
    maybe_placeholders=False,
)


class ASTTransformer(Transformer):
    """Transforms the raw parse tree into an AST."""

    def program(self, items):
        return Program(body=items[0])

    def stmt_list(self, items):
        return list(items)

    def type_name(self, items):
        return DeclaredType(str(items[0]))

    def declaration(self, items):
        return Declaration(type_spec=items[0], declarators=list(items[1:]))

    def declarator(self, items):
        name = str(items[0])
        expr = items[1] if len(items) > 1 else None
        return Declarator(name, expr)

    def assignment(self, items):
        targets = [str(item) for item in items[:-1]]
        return Assign(targets=targets, value=items[-1])

    def keyword_block(self, items):
        return Block(statements=items[0])

    def brace_block(self, items):
        return Block(statements=items[0])

    def if_stmt(self, items):
        condition = items[0]
        then_block = items[1]
        else_branch = items[2] if len(items) > 2 else None
        return IfStmt(condition, then_block, else_branch)

    def while_stmt(self, items):
        return WhileStmt(items[0], items[1])

    def switch_stmt(self, items):
        subject = items[0]
        cases, default = items[1]
        return SwitchStmt(subject, cases, default)

    def switch_body(self, items):
        cases = [item for item in items if isinstance(item, CaseClause)]
        defaults = [item for item in items if isinstance(item, Block)]
        return cases, (defaults[0] if defaults else None)

    def case_clause(self, items):
        return CaseClause(items[0], Block(statements=items[1]))

    def default_clause(self, items):
        return Block(statements=items[0])

    def break_stmt(self, items):
        return BreakStmt()

    def display_stmt(self, items):
        return DisplayStmt(items[0])

    def scan_stmt(self, items):
        return ScanStmt([str(item) for item in items])

    # Expressions
    def and_expr(self, items):
        return BinaryOp(op='AND', left=items[0], right=items[1])

    def or_expr(self, items):
        return BinaryOp(op='OR', left=items[0], right=items[1])

    def not_expr(self, items):
        return UnaryOp(op='NOT', operand=items[0])

    def binary(self, items):
        left, operator, right = items
        return BinaryOp(op=str(operator), left=left, right=right)

    def unary_op(self, items):
        return UnaryOp(op=str(items[0]), operand=items[1])

    def int_literal(self, items):
        token = items[0]
        value = int(token.value)
        # a leading minus is a unary operator, so 2147483648 can never be written
        if value > INT32_MAX:
            raise CodeSyntaxError(f'integer literal {token.value} out of range', token.line, token.column)
        return Literal(Value.integer(value))

    def float_literal(self, items):
        token = items[0]
        try:
            return Literal(Value.floating(float(token.value)))
        except ValueError:
            raise CodeSyntaxError(f'float literal {token.value} out of range', token.line, token.column) from None

    def char_literal(self, items):
        return Literal(Value.character(items[0].value[1:-1]))

    def string_literal(self, items):
        content = items[0].value[1:-1]
        if content.upper() in ('TRUE', 'FALSE'):
            return Literal(Value.boolean(content.upper() == 'TRUE'))
        return Literal(Value.text(content))

    def escape_literal(self, items):
        return Literal(Value.text(items[0].value[1:-1]))

    def newline_mark(self, items):
        return NewlineMark()

    def var_ref(self, items):
        return Ident(str(items[0]))


def parse_program(source: str) -> Program:
    """Parse CODE source into an AST Program.

    Raises CodeSyntaxError for boundary violations, grammar errors and
    malformed literals.
    """
    check_boundaries(source)
    try:
        tree = CODE_PARSER.parse(source)
    except UnexpectedInput as e:
        raise CodeSyntaxError(f'unexpected input {_describe(e)}', e.line, e.column) from e
    try:
        return ASTTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, CodeSyntaxError):
            raise e.orig_exc from None
        raise


def _describe(error: UnexpectedInput) -> str:
    token = getattr(error, 'token', None)
    if token is not None:
        return repr(str(token))
    char = getattr(error, 'char', None)
    if char is not None:
        return repr(char)
    return 'at end of program'
