from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class OperationOptions:
    threads: int = 1
    input: Optional[str] = None
    output: Optional[str] = None


class BaseOperation(ABC):
    """A command the CLI can dispatch to with --operation."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def execute(self, options: OperationOptions):
        pass

    def get_name(self) -> str:
        return self.name


class OperationFactory:
    _operations = {}

    @classmethod
    def register(cls, name: str, operation_class):
        cls._operations[name] = operation_class

    @classmethod
    def create(cls, name: str, **kwargs) -> BaseOperation:
        if name not in cls._operations:
            raise ValueError(f"Unknown operation: {name}")
        return cls._operations[name](**kwargs)

    @classmethod
    def list_available(cls) -> List[str]:
        return list(cls._operations.keys())
