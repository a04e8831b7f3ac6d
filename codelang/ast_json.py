"""JSON serialization/deserialization for CODE ASTs.

This module converts between CODE AST dataclasses and plain Python
dict/list structures suitable for JSON encoding, so a parse tree produced
once (or by another tool) can be executed later without the parser. It
supports a full round-trip for all node types, `DeclaredType` and `Value`.
"""

from __future__ import annotations

from typing import Any, Dict

from .ast import (
    Program,
    Block,
    Declarator,
    Declaration,
    Assign,
    IfStmt,
    WhileStmt,
    CaseClause,
    SwitchStmt,
    BreakStmt,
    DisplayStmt,
    ScanStmt,
    BinaryOp,
    UnaryOp,
    Literal,
    Ident,
    NewlineMark,
)
from .types import DeclaredType, Value, ABSENT


def value_to_obj(v: Value) -> Dict[str, Any]:
    return {"kind": v.kind, "data": v.data}


def value_from_obj(o: Dict[str, Any]) -> Value:
    kind = o["kind"]
    if kind == ABSENT:
        return Value.absent()
    data = o.get("data")
    if kind == 'Integer':
        return Value.integer(int(data))
    if kind == 'Float':
        return Value.floating(float(data))
    if kind == 'Boolean':
        return Value.boolean(bool(data))
    if kind == 'Character':
        return Value.character(str(data))
    if kind == 'Text':
        return Value.text(str(data))
    raise ValueError(f"Unknown value kind: {kind}")


def ast_to_obj(node: Any) -> Any:
    if node is None:
        return None

    if isinstance(node, DeclaredType):
        return {"__type__": "DeclaredType", "name": node.name}
    if isinstance(node, Value):
        return {"__type__": "Value", "value": value_to_obj(node)}

    # Node types
    if isinstance(node, Program):
        return {"type": "Program", "body": [ast_to_obj(n) for n in node.body]}
    if isinstance(node, Block):
        return {"type": "Block", "statements": [ast_to_obj(s) for s in node.statements]}
    if isinstance(node, Declarator):
        return {"type": "Declarator", "name": node.name, "expr": ast_to_obj(node.expr)}
    if isinstance(node, Declaration):
        return {
            "type": "Declaration",
            "type_spec": ast_to_obj(node.type_spec),
            "declarators": [ast_to_obj(d) for d in node.declarators],
        }
    if isinstance(node, Assign):
        return {"type": "Assign", "targets": list(node.targets), "value": ast_to_obj(node.value)}
    if isinstance(node, IfStmt):
        return {
            "type": "IfStmt",
            "condition": ast_to_obj(node.condition),
            "then_block": ast_to_obj(node.then_block),
            "else_branch": ast_to_obj(node.else_branch),
        }
    if isinstance(node, WhileStmt):
        return {"type": "WhileStmt", "condition": ast_to_obj(node.condition), "body": ast_to_obj(node.body)}
    if isinstance(node, CaseClause):
        return {"type": "CaseClause", "value": ast_to_obj(node.value), "body": ast_to_obj(node.body)}
    if isinstance(node, SwitchStmt):
        return {
            "type": "SwitchStmt",
            "subject": ast_to_obj(node.subject),
            "cases": [ast_to_obj(c) for c in node.cases],
            "default": ast_to_obj(node.default),
        }
    if isinstance(node, BreakStmt):
        return {"type": "BreakStmt"}
    if isinstance(node, DisplayStmt):
        return {"type": "DisplayStmt", "expr": ast_to_obj(node.expr)}
    if isinstance(node, ScanStmt):
        return {"type": "ScanStmt", "names": list(node.names)}
    if isinstance(node, BinaryOp):
        return {"type": "BinaryOp", "op": node.op, "left": ast_to_obj(node.left), "right": ast_to_obj(node.right)}
    if isinstance(node, UnaryOp):
        return {"type": "UnaryOp", "op": node.op, "operand": ast_to_obj(node.operand)}
    if isinstance(node, Literal):
        return {"type": "Literal", "value": ast_to_obj(node.value)}
    if isinstance(node, Ident):
        return {"type": "Ident", "name": node.name}
    if isinstance(node, NewlineMark):
        return {"type": "NewlineMark"}

    raise TypeError(f"Unsupported node for serialization: {type(node).__name__}")


def ast_from_obj(obj: Any) -> Any:
    if obj is None:
        return None
    if not isinstance(obj, dict):
        raise TypeError("Invalid AST object")
    if obj.get("__type__") == "DeclaredType":
        return DeclaredType(obj["name"])
    if obj.get("__type__") == "Value":
        return value_from_obj(obj["value"])
    t = obj.get("type")
    if t == "Program":
        return Program(body=[ast_from_obj(n) for n in obj["body"]])
    if t == "Block":
        return Block(statements=[ast_from_obj(s) for s in obj["statements"]])
    if t == "Declarator":
        return Declarator(name=obj["name"], expr=ast_from_obj(obj.get("expr")))
    if t == "Declaration":
        return Declaration(
            type_spec=ast_from_obj(obj["type_spec"]),
            declarators=[ast_from_obj(d) for d in obj["declarators"]],
        )
    if t == "Assign":
        return Assign(targets=list(obj["targets"]), value=ast_from_obj(obj["value"]))
    if t == "IfStmt":
        return IfStmt(
            condition=ast_from_obj(obj["condition"]),
            then_block=ast_from_obj(obj["then_block"]),
            else_branch=ast_from_obj(obj.get("else_branch")),
        )
    if t == "WhileStmt":
        return WhileStmt(condition=ast_from_obj(obj["condition"]), body=ast_from_obj(obj["body"]))
    if t == "CaseClause":
        return CaseClause(value=ast_from_obj(obj["value"]), body=ast_from_obj(obj["body"]))
    if t == "SwitchStmt":
        return SwitchStmt(
            subject=ast_from_obj(obj["subject"]),
            cases=[ast_from_obj(c) for c in obj["cases"]],
            default=ast_from_obj(obj.get("default")),
        )
    if t == "BreakStmt":
        return BreakStmt()
    if t == "DisplayStmt":
        return DisplayStmt(expr=ast_from_obj(obj["expr"]))
    if t == "ScanStmt":
        return ScanStmt(names=list(obj["names"]))
    if t == "BinaryOp":
        return BinaryOp(op=obj["op"], left=ast_from_obj(obj["left"]), right=ast_from_obj(obj["right"]))
    if t == "UnaryOp":
        return UnaryOp(op=obj["op"], operand=ast_from_obj(obj["operand"]))
    if t == "Literal":
        return Literal(value=ast_from_obj(obj["value"]))
    if t == "Ident":
        return Ident(name=obj["name"])
    if t == "NewlineMark":
        return NewlineMark()

    raise ValueError(f"Unknown AST node type: {t}")
