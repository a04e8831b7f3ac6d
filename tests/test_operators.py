import pytest

from codelang.console import ScriptedConsole
from codelang.errors import DivisionByZero, NumericOverflow, TypeMismatch, NullOperand, UnknownOperator
from codelang.interpreter import Interpreter, truncating_divide, truncating_remainder
from codelang.types import Value


@pytest.fixture
def interp():
    return Interpreter(console=ScriptedConsole())


def test_truncating_division():
    assert truncating_divide(-7, 2) == -3
    assert truncating_remainder(-7, 2) == -1
    assert truncating_divide(7, -2) == -3
    assert truncating_remainder(7, -2) == 1


def test_integer_arithmetic(interp):
    assert interp.apply_binary_op('+', Value.integer(2), Value.integer(3)) == Value.integer(5)
    assert interp.apply_binary_op('/', Value.integer(-7), Value.integer(2)) == Value.integer(-3)
    assert interp.apply_binary_op('%', Value.integer(-7), Value.integer(2)) == Value.integer(-1)


def test_integer_overflow_wraps(interp):
    result = interp.apply_binary_op('+', Value.integer(2147483647), Value.integer(1))
    assert result == Value.integer(-2147483648)


def test_mixed_arithmetic_is_float(interp):
    assert interp.apply_binary_op('*', Value.integer(3), Value.floating(0.5)) == Value.floating(1.5)
    assert interp.apply_binary_op('/', Value.integer(7), Value.floating(2.0)) == Value.floating(3.5)


@pytest.mark.parametrize('op, right', [
    ('/', Value.integer(0)),
    ('%', Value.integer(0)),
    ('/', Value.floating(0.0)),
])
def test_division_by_zero(interp, op, right):
    with pytest.raises(DivisionByZero):
        interp.apply_binary_op(op, Value.integer(1), right)


def test_division_by_zero_with_text(interp):
    with pytest.raises(DivisionByZero):
        interp.apply_binary_op('/', Value.text('a4'), Value.integer(0))


def test_remainder_needs_integers(interp):
    with pytest.raises(TypeMismatch):
        interp.apply_binary_op('%', Value.floating(5.0), Value.integer(2))


def test_concatenation(interp):
    assert interp.apply_binary_op('&', Value.text('a'), Value.text('b')) == Value.text('ab')
    assert interp.apply_binary_op('$', Value.integer(1), Value.integer(2)) == Value.text('1\n2')
    assert interp.apply_binary_op('$', Value.absent(), Value.integer(2)) == Value.text('2\n')
    assert interp.apply_binary_op('&', Value.floating(1.5), Value.integer(2)) == Value.text('1.52')
    assert interp.apply_binary_op('&', Value.boolean(True), Value.boolean(False)) == Value.text('TRUEFALSE')
    assert interp.apply_binary_op('&', Value.boolean(True), Value.text('!')) == Value.text('TRUE!')


@pytest.mark.parametrize('op, a, b', [
    ('&', Value.integer(1), Value.boolean(True)),
    ('$', Value.character('a'), Value.integer(1)),
    ('&', Value.boolean(False), Value.floating(2.0)),
])
def test_joining_mixed_variants_needs_text(interp, op, a, b):
    with pytest.raises(TypeMismatch):
        interp.apply_binary_op(op, a, b)


def test_comparisons(interp):
    assert interp.apply_binary_op('<', Value.integer(1), Value.floating(1.5)) == Value.boolean(True)
    assert interp.apply_binary_op('==', Value.character('a'), Value.character('a')) == Value.boolean(True)
    assert interp.apply_binary_op('<>', Value.boolean(True), Value.boolean(False)) == Value.boolean(True)


@pytest.mark.parametrize('op, a, b', [
    ('<', Value.character('a'), Value.character('b')),
    ('==', Value.text('a'), Value.text('a')),
    ('==', Value.integer(1), Value.boolean(True)),
])
def test_illegal_comparisons(interp, op, a, b):
    with pytest.raises(TypeMismatch):
        interp.apply_binary_op(op, a, b)


def test_prefix_arithmetic(interp):
    assert interp.apply_binary_op('+', Value.text('item7'), Value.integer(3)) == Value.text('item10')
    assert interp.apply_binary_op('*', Value.integer(2), Value.text('x21y')) == Value.text('xy42')
    assert interp.apply_binary_op('+', Value.text('a1b2'), Value.integer(3)) == Value.text('ab4')
    assert interp.apply_binary_op('+', Value.text('abc'), Value.integer(5)) == Value.text('abc5')
    with pytest.raises(TypeMismatch):
        interp.apply_binary_op('-', Value.text('abc'), Value.integer(5))


def test_logical_operators(interp):
    assert interp.apply_binary_op('AND', Value.boolean(True), Value.boolean(False)) == Value.boolean(False)
    assert interp.apply_binary_op('OR', Value.boolean(False), Value.boolean(True)) == Value.boolean(True)
    with pytest.raises(TypeMismatch):
        interp.apply_binary_op('AND', Value.integer(1), Value.boolean(True))


def test_unary_operators(interp):
    assert interp.apply_unary_op('-', Value.integer(4)) == Value.integer(-4)
    assert interp.apply_unary_op('+', Value.floating(1.5)) == Value.floating(1.5)
    assert interp.apply_unary_op('NOT', Value.boolean(False)) == Value.boolean(True)
    with pytest.raises(TypeMismatch):
        interp.apply_unary_op('-', Value.text('4'))


def test_absent_operand_is_fatal(interp):
    with pytest.raises(NullOperand) as info:
        interp.apply_binary_op('+', Value.absent(), Value.integer(1))
    assert info.value.fatal
    with pytest.raises(NullOperand):
        interp.apply_unary_op('-', Value.absent())


def test_unknown_operator_is_fatal(interp):
    with pytest.raises(UnknownOperator) as info:
        interp.apply_binary_op('**', Value.integer(2), Value.integer(3))
    assert info.value.fatal


def test_float_arithmetic_is_single_precision(interp):
    big = Value.floating(16777216.0)
    assert interp.apply_binary_op('+', big, Value.floating(1.0)) == big
    assert interp.apply_binary_op('+', Value.integer(16777217), Value.floating(0.0)) == big
    assert interp.apply_binary_op('==', Value.integer(16777217), big) == Value.boolean(True)


def test_float_overflow(interp):
    with pytest.raises(NumericOverflow) as info:
        interp.apply_binary_op('*', Value.floating(3e38), Value.floating(10.0))
    assert not info.value.fatal
