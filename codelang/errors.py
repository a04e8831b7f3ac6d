from typing import Optional


class CodeError(Exception):
    """Base class for CODE runtime errors.

    Recoverable errors abort the statement being executed; the interpreter
    reports them and carries on with the next statement. Errors marked
    `fatal` always stop the run.
    """
    kind = 'CodeError'
    fatal = False

    def __init__(self, message: str):
        super().__init__(f"{self.kind}: {message}")
        self.message = message


class AlreadyDeclared(CodeError):
    kind = 'AlreadyDeclared'


class UndeclaredVariable(CodeError):
    kind = 'UndeclaredVariable'


class TypeMismatch(CodeError):
    kind = 'TypeMismatch'


class InvalidConversion(CodeError):
    kind = 'InvalidConversion'


class DivisionByZero(CodeError):
    kind = 'DivisionByZero'


class NumericOverflow(CodeError):
    """Raised when a Float result leaves the single-precision range."""
    kind = 'NumericOverflow'


class InvalidCaseType(CodeError):
    kind = 'InvalidCaseType'


class MissingBreakOnDefault(CodeError):
    kind = 'MissingBreakOnDefault'


class MisplacedBreak(CodeError):
    kind = 'MisplacedBreak'


class UnknownOperator(CodeError):
    """Raised when the tree holds an operator the evaluator has no rule for."""
    kind = 'UnknownOperator'
    fatal = True


class NullOperand(CodeError):
    """Raised when an unassigned (Absent) value reaches an operator."""
    kind = 'NullOperand'
    fatal = True


class CodeSyntaxError(Exception):
    """Raised by the parser for malformed programs."""
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        where = f" at {line}:{column}" if line is not None else ''
        super().__init__(f"SyntaxError{where}: {message}")
        self.message = message
        self.line = line
        self.column = column
