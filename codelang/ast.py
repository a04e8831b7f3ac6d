"""Abstract Syntax Tree (AST) definitions for the CODE language.

The AST classes defined in this module represent the syntactic structure
of parsed CODE programs. They are used by the interpreter to evaluate
CODE programs and are never modified by it. Each node corresponds to a
construct in the CODE grammar.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from .types import DeclaredType, Value


@dataclass
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass
class Program(Node):
    body: List[Node]


@dataclass
class Block(Node):
    statements: List[Node] = field(default_factory=list)


@dataclass
class Declarator:
    name: str
    expr: Optional[Node] = None  # initial value


@dataclass
class Declaration(Node):
    type_spec: DeclaredType
    declarators: List[Declarator]


@dataclass
class Assign(Node):
    targets: List[str]  # x = y = expr assigns x, then y
    value: Node


@dataclass
class IfStmt(Node):
    condition: Node
    then_block: Block
    else_branch: Optional[Node] = None  # IfStmt for ELSE IF, Block for ELSE


@dataclass
class WhileStmt(Node):
    condition: Node
    body: Block


@dataclass
class CaseClause:
    value: Node
    body: Block


@dataclass
class SwitchStmt(Node):
    subject: Node
    cases: List[CaseClause]
    default: Optional[Block] = None


@dataclass
class BreakStmt(Node):
    pass


@dataclass
class DisplayStmt(Node):
    expr: Node


@dataclass
class ScanStmt(Node):
    names: List[str]


@dataclass
class BinaryOp(Node):
    op: str
    left: Node
    right: Node


@dataclass
class UnaryOp(Node):
    op: str
    operand: Node


@dataclass
class Literal(Node):
    value: Value


@dataclass
class Ident(Node):
    name: str


@dataclass
class NewlineMark(Node):
    """A bare `$` in operand position: a forced line break."""
    pass
