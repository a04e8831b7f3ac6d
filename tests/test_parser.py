import pytest

from codelang.ast import (
    Assign, BinaryOp, Block, Declaration, DisplayStmt, IfStmt, Literal, NewlineMark, SwitchStmt, UnaryOp, WhileStmt,
)
from codelang.errors import CodeSyntaxError
from codelang.parser import parse_program
from codelang.types import Value, INT_TYPE


def code(*lines):
    return '\n'.join(('BEGIN CODE',) + lines + ('END CODE',)) + '\n'


@pytest.mark.parametrize('source, message', [
    ('INT x = 1\n', 'Missing BEGIN CODE and END CODE'),
    ('INT x = 1\nEND CODE\n', 'Missing BEGIN CODE'),
    ('BEGIN CODE\nINT x = 1\n', 'Missing END CODE'),
    ('INT x\nBEGIN CODE\nINT y\nEND CODE\n', 'BEGIN CODE must only be at the beginning of the program'),
    ('BEGIN CODE\nINT y\nEND CODE\nINT x\n', 'END CODE must only be at the end of the program'),
    ('BEGIN CODE\nEND CODE\n', 'CODE not recognized, cannot be executed'),
])
def test_boundary_messages(source, message):
    with pytest.raises(CodeSyntaxError) as info:
        parse_program(source)
    assert info.value.message == message


def test_comments_and_blank_lines_around_boundaries():
    program = parse_program('# header\n\nBEGIN CODE\nINT x = 1\nEND CODE\n# trailer\n')
    assert len(program.body) == 1


def test_declaration():
    program = parse_program(code('INT a, b = 2'))
    decl = program.body[0]
    assert isinstance(decl, Declaration)
    assert decl.type_spec == INT_TYPE
    assert [d.name for d in decl.declarators] == ['a', 'b']
    assert decl.declarators[0].expr is None
    assert decl.declarators[1].expr == Literal(Value.integer(2))


def test_chained_assignment():
    stmt = parse_program(code('x = y = 4')).body[0]
    assert isinstance(stmt, Assign)
    assert stmt.targets == ['x', 'y']


def test_semicolons_separate_statements():
    program = parse_program(code('INT x; x = 1; DISPLAY: x'))
    assert len(program.body) == 3


def test_operator_precedence():
    expr = parse_program(code('DISPLAY: 1 + 2 * -3 > 4 AND NOT "FALSE"')).body[0].expr
    assert expr.op == 'AND'
    comparison = expr.left
    assert comparison.op == '>'
    total = comparison.left
    assert total.op == '+'
    assert total.right.op == '*'
    assert isinstance(total.right.right, UnaryOp)
    assert isinstance(expr.right, UnaryOp) and expr.right.op == 'NOT'


def test_dollar_atom_and_operator():
    expr = parse_program(code('DISPLAY: $ & 1 $ 2')).body[0].expr
    assert isinstance(expr, BinaryOp) and expr.op == '$'
    assert expr.left.op == '&'
    assert isinstance(expr.left.left, NewlineMark)


def test_literals():
    body = parse_program(code('DISPLAY: "true"', "DISPLAY: 'x'", 'DISPLAY: 2.50', 'DISPLAY: "text"')).body
    assert body[0].expr == Literal(Value.boolean(True))
    assert body[1].expr == Literal(Value.character('x'))
    assert body[2].expr == Literal(Value.floating(2.5))
    assert body[3].expr == Literal(Value.text('text'))


@pytest.mark.parametrize('escape, text', [
    ('[#]', '#'),
    ('[[]', '['),
    ('[]]', ']'),
    ('[&$]', '&$'),
])
def test_escapes(escape, text):
    stmt = parse_program(code(f'DISPLAY: {escape}')).body[0]
    assert isinstance(stmt, DisplayStmt)
    assert stmt.expr == Literal(Value.text(text))


def test_integer_literal_out_of_range():
    with pytest.raises(CodeSyntaxError) as info:
        parse_program(code('INT x = 2147483648'))
    assert 'out of range' in info.value.message
    assert info.value.line == 2


def test_if_else_chain():
    program = parse_program(code(
        'IF (x > 1)',
        'BEGIN IF',
        '    DISPLAY: 1',
        'END IF',
        '# a comment between branches',
        'ELSE IF (x > 0) {',
        '    DISPLAY: 2',
        '}',
        'ELSE',
        '{ DISPLAY: 3 }',
        'DISPLAY: 4',
    ))
    assert len(program.body) == 2
    stmt = program.body[0]
    assert isinstance(stmt, IfStmt)
    assert isinstance(stmt.else_branch, IfStmt)
    assert isinstance(stmt.else_branch.else_branch, Block)


def test_while_with_keyword_block():
    stmt = parse_program(code('WHILE (i < 3)', 'BEGIN WHILE', 'i = i + 1', 'END WHILE')).body[0]
    assert isinstance(stmt, WhileStmt)
    assert len(stmt.body.statements) == 1


def test_switch():
    stmt = parse_program(code(
        'SWITCH (x)',
        'BEGIN SWITCH',
        'CASE 1:',
        '    DISPLAY: "a"',
        '    BREAK',
        "CASE 2: DISPLAY: \"b\"",
        'DEFAULT:',
        '    BREAK',
        'END SWITCH',
    )).body[0]
    assert isinstance(stmt, SwitchStmt)
    assert [c.value for c in stmt.cases] == [Literal(Value.integer(1)), Literal(Value.integer(2))]
    assert len(stmt.default.statements) == 1


@pytest.mark.parametrize('line', [
    'INT',
    'DISPLAY 1',
    'DISPLAY: 1 $',
    'x = ',
    'IF (x) DISPLAY: 1',
])
def test_syntax_errors(line):
    with pytest.raises(CodeSyntaxError) as info:
        parse_program(code(line))
    assert str(info.value).startswith('SyntaxError')


def test_float_literal_out_of_range():
    with pytest.raises(CodeSyntaxError) as info:
        parse_program(code('FLOAT f = 1' + '0' * 40 + '.0'))
    assert 'out of range' in info.value.message
