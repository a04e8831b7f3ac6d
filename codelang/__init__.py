# CODE language package
# This package provides a parser and interpreter for the CODE pseudocode language.
from .errors import CodeError, CodeSyntaxError
from .interpreter import run_program, run_file, Interpreter
from .parser import parse_program

__all__ = [
    'run_program',
    'run_file',
    'parse_program',
    'Interpreter',
    'CodeError',
    'CodeSyntaxError',
]
