from __future__ import annotations

from typing import Dict, Iterable, Type

from .config import RuleKey
from .gate import Gate


class GateRegistry:
    """Close-gate classes keyed by the `RuleKey` whose config they read.

    One gate per rule key. The evaluator instantiates them in registration
    order, which is the order their blocking reasons are reported in.
    """

    def __init__(self):
        self._gates: Dict[RuleKey, Type[Gate]] = {}

    def register(self, gate_cls: Type[Gate]) -> None:
        rule_key = getattr(gate_cls, "rule_key", None)
        if not rule_key:
            raise ValueError("Gate class missing rule_key")
        if rule_key in self._gates:
            raise ValueError(f"Duplicate gate registered: {rule_key.value}")
        self._gates[rule_key] = gate_cls

    def create_all(self) -> list[Gate]:
        return [cls() for cls in self._gates.values()]

    def get(self, rule_key: RuleKey) -> Type[Gate]:
        return self._gates[rule_key]

    def keys(self) -> Iterable[RuleKey]:
        return self._gates.keys()

    def __contains__(self, rule_key: object) -> bool:
        return rule_key in self._gates


registry = GateRegistry()


def register_gate(gate_cls: Type[Gate]) -> Type[Gate]:
    registry.register(gate_cls)
    return gate_cls
