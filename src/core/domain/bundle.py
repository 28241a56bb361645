"""Construcción de bundles para `/shortcuts/bundle`.

Un bundle es una lista ordenada de acciones (`protocol` + `action` + `args`).
Los argumentos pueden ser literales o referencias a la salida de una acción
anterior (`{"useOutputOfCallAt": n}`).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Union

from core.domain.models import Action, Protocol

ENSO_PROTOCOL = Protocol(slug="enso", url="https://api.enso.finance")

ACTION_CALL = Action(
    action="call",
    inputs={"address": "", "method": "", "abi": "", "args": ""},
)


@dataclass(frozen=True)
class Value:
    """Literal (direcciones, cantidades raw, firmas ABI...)."""

    value: str


@dataclass(frozen=True)
class LastTransaction:
    """Salida de la acción inmediatamente anterior."""


@dataclass(frozen=True)
class Transaction:
    """Salida de la acción en la posición `index` del bundle."""

    index: int


@dataclass(frozen=True)
class ValueArray:
    values: tuple["ParamValue", ...] = ()

    def __init__(self, values: Any = ()) -> None:
        object.__setattr__(self, "values", tuple(values))


ParamValue = Union[Value, LastTransaction, Transaction, ValueArray]


def parse_non_negative_int(raw: Any, what: str) -> int:
    """Entero >= 0 desde JSON (int o string de dígitos); si no, ValueError."""

    if isinstance(raw, int) and not isinstance(raw, bool) and raw >= 0:
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw)
    raise ValueError(f"{what} must be a non-negative integer, got {raw!r}")


def _output_of_call_at(index: int) -> dict[str, int]:
    return {"useOutputOfCallAt": index}


def param_value_to_json(value: ParamValue, current_tx: int) -> Any:
    """Serializa un argumento en el contexto de la acción `current_tx`."""

    if isinstance(value, Value):
        return value.value
    if isinstance(value, LastTransaction):
        # La primera acción no tiene predecesora: se envía un literal "0".
        if current_tx > 0:
            return _output_of_call_at(current_tx - 1)
        return "0"
    if isinstance(value, Transaction):
        return _output_of_call_at(value.index)
    if isinstance(value, ValueArray):
        return [param_value_to_json(item, current_tx) for item in value.values]
    raise TypeError(f"Unsupported bundle argument: {value!r}")


def param_value_from_json(raw: Any) -> ParamValue:
    """Inversa de `param_value_to_json` para bundles descritos en JSON.

    `{"useOutputOfCallAt": n}` se interpreta siempre como `Transaction(n)`.
    Números y booleanos se convierten a string porque el API espera strings.
    """

    if isinstance(raw, dict):
        if "useOutputOfCallAt" in raw:
            return Transaction(parse_non_negative_int(raw["useOutputOfCallAt"], "useOutputOfCallAt"))
        if raw.get("lastTransaction") is True:
            return LastTransaction()
        raise ValueError(f"Unsupported bundle argument object: {raw!r}")
    if isinstance(raw, list):
        return ValueArray(param_value_from_json(item) for item in raw)
    if isinstance(raw, bool):
        return Value("true" if raw else "false")
    if isinstance(raw, (str, int, float)):
        return Value(str(raw))
    raise ValueError(f"Unsupported bundle argument: {raw!r}")


@dataclass
class BundleStep:
    protocol: Protocol
    action: Action
    args: list[ParamValue] = field(default_factory=list)

    def to_json(self, current_tx: int) -> dict[str, Any]:
        # zip: inputs sin argumento (o argumentos sobrantes) no se envían.
        args = {
            name: param_value_to_json(value, current_tx)
            for (name, _), value in zip(self.action.inputs, self.args)
        }
        return {
            "protocol": self.protocol.slug,
            "action": self.action.action,
            "args": args,
        }


class Bundle:
    """Secuencia de acciones a ejecutar atómicamente en una chain."""

    def __init__(self, chain_id: int) -> None:
        self.chain_id = chain_id
        self.steps: list[BundleStep] = []

    def __len__(self) -> int:
        return len(self.steps)

    def add_action(self, protocol: Protocol, action: Action, args: list[ParamValue]) -> None:
        self.steps.append(BundleStep(protocol=protocol, action=action, args=list(args)))

    def add_enso_action(self, action: Action, args: list[ParamValue]) -> None:
        self.add_action(ENSO_PROTOCOL, action, args)

    def add_call(self, args: list[ParamValue], abi_args: list[ParamValue]) -> None:
        """Añade una llamada arbitraria a contrato (`address, method, abi, args`)."""

        self.add_action(ENSO_PROTOCOL, ACTION_CALL, [*args, ValueArray(abi_args)])

    def to_payload(self) -> list[dict[str, Any]]:
        return [step.to_json(index) for index, step in enumerate(self.steps)]


def classify_input(name: str) -> str:
    """Clasifica un input de acción para sugerir el tipo de valor.

    Devuelve: 'token', 'address', 'text', 'args' o 'value'.
    """

    lowered = name.lower()
    if "token" in lowered:
        return "token"
    if "address" in lowered:
        return "address"
    if lowered in ("method", "abi"):
        return "text"
    if lowered == "args":
        return "args"
    return "value"


def default_args(action: Action) -> list[ParamValue]:
    """Argumentos placeholder para una acción (plantillas de bundle)."""

    out: list[ParamValue] = []
    for name, _ in action.inputs:
        kind = classify_input(name)
        if kind in ("token", "address"):
            out.append(Value("0x"))
        elif kind == "args":
            out.append(ValueArray())
        else:
            out.append(Value("0"))
    return out
