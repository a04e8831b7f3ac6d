from typing import Dict, Iterator, Optional, Tuple
from codelang.errors import AlreadyDeclared, UndeclaredVariable, TypeMismatch
from codelang.types import DeclaredType, Value, convert_value, type_name


class Environment:
    """The single flat scope of a CODE program run.

    Maps each variable name to its declared type and current value. Names
    are case-sensitive and kept in declaration order.
    """
    def __init__(self):
        self.values: Dict[str, Value] = {}
        self.types: Dict[str, DeclaredType] = {}

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def __iter__(self) -> Iterator[Tuple[str, DeclaredType, Value]]:
        for name, value in self.values.items():
            yield name, self.types[name], value

    def __len__(self) -> int:
        return len(self.values)

    def get(self, name: str) -> Value:
        if name in self.values:
            return self.values[name]
        raise UndeclaredVariable(f'variable {name} is not declared')

    def declared_type(self, name: str) -> DeclaredType:
        if name in self.types:
            return self.types[name]
        raise UndeclaredVariable(f'variable {name} is not declared')

    def declare(self, name: str, declared: DeclaredType, initial: Optional[Value] = None):
        if name in self.values:
            raise AlreadyDeclared(f'variable {name} is already declared')
        # convert before storing anything so a failed conversion leaves no trace
        value = Value.absent() if initial is None else convert_value(declared, initial)
        self.values[name] = value
        self.types[name] = declared

    def assign(self, name: str, value: Value):
        declared = self.declared_type(name)
        if value.kind != declared.value_kind:
            raise TypeMismatch(
                f'cannot assign {type_name(value)} to variable {name} of type {declared.name}'
            )
        self.values[name] = value
