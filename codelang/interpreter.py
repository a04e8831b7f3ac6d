"""Interpreter for the CODE language.

This module implements the evaluator at the heart of the toolchain: a
statement executor that walks the AST produced by `codelang.parser`, and
an expression evaluator that applies the CODE operator and type-promotion
rules to `Value` operands. Variables live in a single flat `Environment`
that is passed explicitly through every call.

Runtime faults are `CodeError` exceptions. A recoverable fault abandons
the statement it happened in, is reported, and execution resumes with the
next statement. `BREAK` is not an exception: statement lists return a
`Flow` signal that the enclosing SWITCH consumes.
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional
import operator
import re

from .ast import (
    Program, Block, Declaration, Declarator, Assign, IfStmt, WhileStmt,
    SwitchStmt, BreakStmt, DisplayStmt, ScanStmt,
    BinaryOp, UnaryOp, Literal, Ident, NewlineMark, Node,
)
from .console import ConsoleIO
from .environment import Environment
from .errors import (
    CodeError, TypeMismatch, DivisionByZero, NumericOverflow, InvalidCaseType,
    MissingBreakOnDefault, MisplacedBreak, UnknownOperator, NullOperand,
)
from .parser import parse_program
from .types import (
    Value, DeclaredType, INTEGER, FLOAT, BOOLEAN, CHARACTER, TEXT,
    to_string, type_name, parse_input, wrap_int32, to_single,
)


class Flow(Enum):
    """Completion signal of a statement or statement list."""
    NORMAL = 'normal'
    BREAK = 'break'


ARITHMETIC_OPS = ('+', '-', '*', '/', '%')
CONCAT_OPS = ('&', '$')
COMPARISON_OPS = ('==', '<>', '>', '<', '>=', '<=')
EQUALITY_OPS = ('==', '<>')
LOGICAL_OPS = ('AND', 'OR')
BINARY_OPS = ARITHMETIC_OPS + CONCAT_OPS + COMPARISON_OPS + LOGICAL_OPS
UNARY_OPS = ('+', '-', 'NOT')

# operators that accept a Text operand paired with an Integer
PREFIX_ARITHMETIC_OPS = ('+', '-', '*', '/')

_COMPARE = {
    '==': operator.eq,
    '<>': operator.ne,
    '>': operator.gt,
    '<': operator.lt,
    '>=': operator.ge,
    '<=': operator.le,
}

_DIGIT_RUN = re.compile(r'[0-9]+')


def truncating_divide(a: int, b: int) -> int:
    """Integer division rounding toward zero: -7 / 2 == -3."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def truncating_remainder(a: int, b: int) -> int:
    """Remainder matching truncating_divide; takes the sign of `a`."""
    return a - b * truncating_divide(a, b)


class Interpreter:
    """Core interpreter that executes CODE ASTs."""
    def __init__(self, debug_level: int = 0, debug_file: str = 'debug.txt',
                 strict: bool = False, console: Optional[ConsoleIO] = None):
        self.global_env = Environment()
        self.console = console if console is not None else ConsoleIO()
        self.strict = strict
        self.errors: List[CodeError] = []
        self.debug_level = debug_level
        self.debug_fp = open(debug_file, 'w', encoding='utf-8') if debug_level > 0 else None

    def debug(self, level: int, msg: str):
        if self.debug_level >= level:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg)

    def report(self, error: CodeError):
        """Record a recoverable error and show it on the error stream."""
        self.errors.append(error)
        self.debug(1, f"error {error}")
        self.console.report(f"Error: {error}")

    # Public API
    def run(self, program: Program, env: Optional[Environment] = None) -> Environment:
        if env is None:
            env = self.global_env
        try:
            for stmt in program.body:
                if self.execute_statement(stmt, env) is Flow.BREAK:
                    self.recover(MisplacedBreak('BREAK outside of SWITCH'))
        finally:
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        return env

    def recover(self, error: CodeError):
        if error.fatal or self.strict:
            raise error
        self.report(error)

    def execute_statement(self, node: Node, env: Environment) -> Flow:
        """Execute one statement, containing any recoverable error to it."""
        try:
            return self.execute(node, env)
        except CodeError as ex:
            self.recover(ex)
            return Flow.NORMAL

    def execute_block(self, statements: List[Node], env: Environment) -> Flow:
        for stmt in statements:
            if self.execute_statement(stmt, env) is Flow.BREAK:
                return Flow.BREAK
        return Flow.NORMAL

    def execute(self, node: Node, env: Environment) -> Flow:
        self.debug(1, f"execute {type(node).__name__}")
        if isinstance(node, Declaration):
            # names without an initializer share the next one to their right
            group: List[Declarator] = []
            for declarator in node.declarators:
                group.append(declarator)
                if declarator.expr is not None:
                    self.declare(node.type_spec, group, declarator.expr, env)
                    group = []
            if group:
                self.declare(node.type_spec, group, None, env)
            return Flow.NORMAL
        if isinstance(node, Assign):
            value = self.evaluate(node.value, env)
            for target in node.targets:
                env.assign(target, value)
                self.debug(2, f"assign {target} = {value!r}")
            return Flow.NORMAL
        if isinstance(node, IfStmt):
            if self.evaluate_condition(node.condition, env, 'IF'):
                return self.execute_block(node.then_block.statements, env)
            if isinstance(node.else_branch, IfStmt):
                return self.execute(node.else_branch, env)
            if isinstance(node.else_branch, Block):
                return self.execute_block(node.else_branch.statements, env)
            return Flow.NORMAL
        if isinstance(node, WhileStmt):
            while self.evaluate_condition(node.condition, env, 'WHILE'):
                if self.execute_block(node.body.statements, env) is Flow.BREAK:
                    # no loop-level break: the signal belongs to an enclosing SWITCH
                    return Flow.BREAK
            return Flow.NORMAL
        if isinstance(node, SwitchStmt):
            return self.execute_switch(node, env)
        if isinstance(node, BreakStmt):
            return Flow.BREAK
        if isinstance(node, DisplayStmt):
            value = self.evaluate_display(node.expr, env)
            self.console.write_line(to_string(value))
            return Flow.NORMAL
        if isinstance(node, ScanStmt):
            for name in node.names:
                declared = env.declared_type(name)
                raw = self.console.read_line()
                value = parse_input(declared, raw)
                env.assign(name, value)
                self.debug(2, f"scan {name} = {value!r}")
            return Flow.NORMAL
        # catch any other nodes
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def declare(self, type_spec: DeclaredType, declarators: List[Declarator],
                initializer: Optional[Node], env: Environment):
        """Declare names sharing one initializer, evaluated once."""
        try:
            initial = self.evaluate(initializer, env) if initializer is not None else None
        except CodeError as ex:
            self.recover(ex)
            return
        for declarator in declarators:
            # each name stands on its own: one failure does not stop the rest
            try:
                env.declare(declarator.name, type_spec, initial)
            except CodeError as ex:
                self.recover(ex)
                continue
            self.debug(2, f"declare {declarator.name}: {type_spec} = {env.get(declarator.name)!r}")

    def evaluate_condition(self, node: Node, env: Environment, keyword: str) -> bool:
        value = self.evaluate(node, env)
        self.debug(3, f"{keyword} condition {value!r}")
        if value.kind != BOOLEAN:
            raise TypeMismatch(f'{keyword} condition must be Boolean, got {type_name(value)}')
        return value.data

    def execute_switch(self, node: SwitchStmt, env: Environment) -> Flow:
        if node.default is not None and not ends_in_break(node.default):
            raise MissingBreakOnDefault('DEFAULT block must end with BREAK')
        subject = self.evaluate(node.subject, env)
        self.debug(3, f"SWITCH subject {subject!r}")
        for case in node.cases:
            candidate = self.evaluate(case.value, env)
            if candidate.kind != subject.kind:
                raise InvalidCaseType(
                    f'CASE value of type {type_name(candidate)} does not match SWITCH type {type_name(subject)}'
                )
            if candidate == subject:
                if self.execute_block(case.body.statements, env) is Flow.BREAK:
                    return Flow.NORMAL
        if node.default is not None:
            self.execute_block(node.default.statements, env)
        return Flow.NORMAL

    def evaluate(self, node: Node, env: Environment) -> Value:
        # Evaluate expression nodes
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Ident):
            return env.get(node.name)
        if isinstance(node, NewlineMark):
            return Value.text('\n')
        if isinstance(node, UnaryOp):
            operand = self.evaluate(node.operand, env)
            return self.apply_unary_op(node.op, operand)
        if isinstance(node, BinaryOp):
            if node.op in LOGICAL_OPS:
                return self.evaluate_logical(node, env)
            left = self.evaluate(node.left, env)
            right = self.evaluate(node.right, env)
            return self.apply_binary_op(node.op, left, right)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def evaluate_display(self, node: Node, env: Environment) -> Value:
        """Evaluate a DISPLAY list. Its top-level `&` and `$` join any two values."""
        if isinstance(node, BinaryOp) and node.op in CONCAT_OPS:
            left = self.evaluate_display(node.left, env)
            right = self.evaluate_display(node.right, env)
            return self.join(node.op, left, right, any_pair=True)
        return self.evaluate(node, env)

    def evaluate_logical(self, node: BinaryOp, env: Environment) -> Value:
        # AND / OR short-circuit; both sides must be Boolean when evaluated
        left = require_boolean(node.op, self.evaluate(node.left, env))
        if node.op == 'AND' and not left.data:
            return left
        if node.op == 'OR' and left.data:
            return left
        return require_boolean(node.op, self.evaluate(node.right, env))

    def apply_unary_op(self, op: str, operand: Value) -> Value:
        if op not in UNARY_OPS:
            raise UnknownOperator(f'unknown unary operator {op}')
        if operand.is_absent:
            raise NullOperand(f'unary {op} applied to a variable with no value')
        if op == 'NOT':
            return Value.boolean(not require_boolean(op, operand).data)
        if operand.kind == INTEGER:
            return Value.integer(-operand.data) if op == '-' else operand
        if operand.kind == FLOAT:
            return Value.floating(-operand.data) if op == '-' else operand
        raise TypeMismatch(f'unary {op} expects a number, got {type_name(operand)}')

    def apply_binary_op(self, op: str, a: Value, b: Value) -> Value:
        if op not in BINARY_OPS:
            raise UnknownOperator(f'unknown operator {op}')
        if op in LOGICAL_OPS:
            require_boolean(op, a)
            require_boolean(op, b)
            result = (a.data and b.data) if op == 'AND' else (a.data or b.data)
            return Value.boolean(result)
        if op in CONCAT_OPS:
            return self.join(op, a, b)
        if a.is_absent or b.is_absent:
            raise NullOperand(f'operator {op} applied to a variable with no value')
        if op in COMPARISON_OPS:
            return self.compare(op, a, b)
        return self.arithmetic(op, a, b)

    def join(self, op: str, a: Value, b: Value, any_pair: bool = False) -> Value:
        if a.is_absent or b.is_absent:
            if op == '$':
                present = b if a.is_absent else a
                return Value.text(to_string(present) + '\n')
            raise NullOperand(f'operator {op} applied to a variable with no value')
        if not any_pair and not joinable(a, b):
            raise TypeMismatch(f'cannot join {type_name(a)} and {type_name(b)} with {op}')
        separator = '\n' if op == '$' else ''
        return Value.text(to_string(a) + separator + to_string(b))

    def compare(self, op: str, a: Value, b: Value) -> Value:
        if a.is_numeric and b.is_numeric:
            x, y = a.data, b.data
            if a.kind != b.kind:
                # mixed Integer/Float compares as Float
                x, y = to_single(x), to_single(y)
            return Value.boolean(_COMPARE[op](x, y))
        if a.kind == b.kind and a.kind in (BOOLEAN, CHARACTER):
            if op in EQUALITY_OPS:
                return Value.boolean(_COMPARE[op](a.data, b.data))
            raise TypeMismatch(f'operator {op} is not defined for {a.kind} operands')
        raise TypeMismatch(f'cannot compare {type_name(a)} and {type_name(b)} with {op}')

    def arithmetic(self, op: str, a: Value, b: Value) -> Value:
        if op in ('/', '%') and b.is_numeric and b.data == 0:
            raise DivisionByZero('division by zero')
        if a.kind == INTEGER and b.kind == INTEGER:
            return Value.integer(self.integer_arithmetic(op, a.data, b.data))
        if a.is_numeric and b.is_numeric:
            if op == '%':
                raise TypeMismatch('% requires Integer operands')
            result = self.float_arithmetic(op, to_single(a.data), to_single(b.data))
            try:
                return Value.floating(result)
            except ValueError:
                raise NumericOverflow(f'{op} result {result!r} is outside the Float range') from None
        if {a.kind, b.kind} == {TEXT, INTEGER} and op in PREFIX_ARITHMETIC_OPS:
            return self.prefix_arithmetic(op, a, b)
        raise TypeMismatch(f'unsupported {op} for {type_name(a)} and {type_name(b)}')

    def integer_arithmetic(self, op: str, a: int, b: int) -> int:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        if b == 0:
            raise DivisionByZero('division by zero')
        if op == '/':
            return truncating_divide(a, b)
        return truncating_remainder(a, b)

    def float_arithmetic(self, op: str, a: float, b: float) -> float:
        if op == '+':
            return a + b
        if op == '-':
            return a - b
        if op == '*':
            return a * b
        return a / b

    def prefix_arithmetic(self, op: str, a: Value, b: Value) -> Value:
        """Arithmetic between Text and Integer using the Text's digit run.

        ``"item7" + 3`` yields ``"item10"``: the first run of digits in the
        Text is the number, and the Text's non-digit characters are kept in
        front of the result. Text without digits only supports `+`, which joins.
        """
        text = a if a.kind == TEXT else b
        number = b if text is a else a
        match = _DIGIT_RUN.search(text.data)
        if match is None:
            if op == '+':
                return Value.text(to_string(a) + to_string(b))
            raise TypeMismatch(f'unsupported {op} for {type_name(a)} and {type_name(b)}: no digits in {text.data!r}')
        run = int(match.group())
        rest = _DIGIT_RUN.sub('', text.data)
        if text is a:
            result = self.integer_arithmetic(op, run, number.data)
        else:
            result = self.integer_arithmetic(op, number.data, run)
        return Value.text(rest + str(wrap_int32(result)))


def require_boolean(op: str, value: Value) -> Value:
    if value.is_absent:
        raise NullOperand(f'{op} applied to a variable with no value')
    if value.kind != BOOLEAN:
        raise TypeMismatch(f'{op} expects Boolean operands, got {type_name(value)}')
    return value


def joinable(a: Value, b: Value) -> bool:
    """Whether `&` and `$` accept this pair outside a DISPLAY list."""
    if TEXT in (a.kind, b.kind):
        return True
    return a.kind == b.kind or (a.is_numeric and b.is_numeric)


def ends_in_break(block: Block) -> bool:
    return bool(block.statements) and isinstance(block.statements[-1], BreakStmt)


def run_program(source: str, debug_level: int = 0, console: Optional[ConsoleIO] = None) -> Interpreter:
    """Convenience function to parse and run a CODE program from source string."""
    program = parse_program(source)
    interpreter = Interpreter(debug_level=debug_level, console=console)
    interpreter.run(program)
    return interpreter


def run_file(file_path: str, debug_level: int = 0) -> Interpreter:
    """Parse and execute a CODE file, returning the interpreter instance."""
    with open(file_path, 'r', encoding='utf-8') as f:
        source = f.read()
    return run_program(source, debug_level=debug_level)
