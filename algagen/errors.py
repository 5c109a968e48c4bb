"""Diagnostics raised while deriving algebraic-structure implementations.

Every error aborts the current target only. Each carries the structured
context needed to render an actionable message (kind name, expected vs.
actual counts, suggested correction).
"""

from __future__ import annotations

from typing import Any


class DeriveError(ValueError):
    """Base class for all generator diagnostics."""

    code = "derive-error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code, "message": self.message, **self.context()}


class UnknownKind(DeriveError):
    code = "unknown-kind"

    def __init__(self, given: str, suggestion: str | None) -> None:
        self.given = given
        self.suggestion = suggestion
        msg = f"Unknown structure kind `{given}`."
        if suggestion:
            msg += f" Did you mean `{suggestion}`?"
        super().__init__(msg)

    def context(self) -> dict[str, Any]:
        return {"given": self.given, "suggestion": self.suggestion}


def _operator_slots(arity: int) -> str:
    if arity == 1:
        return "Operator"
    return ", ".join(f"Operator{i + 1}" for i in range(arity))


class ArityMismatch(DeriveError):
    code = "arity-mismatch"

    def __init__(self, kind: str, expected: int, actual: int) -> None:
        self.kind = kind
        self.expected = expected
        self.actual = actual
        if actual == 0:
            self.detail = "none provided"
        elif actual == 1:
            self.detail = "only one provided"
        else:
            self.detail = "too many provided"

        noun = "operator" if expected == 1 else "operators"
        msg = (
            f"`{kind}` requires {expected} {noun}, {self.detail}.\n"
            f"Operators have to be specified explicitly: `{kind}({_operator_slots(expected)})`."
        )
        super().__init__(msg)

    def context(self) -> dict[str, Any]:
        return {"kind": self.kind, "expected": self.expected, "actual": self.actual, "detail": self.detail}


class MisplacedWhereClause(DeriveError):
    code = "misplaced-where"

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Misplaced `Where` entry: {reason}.")

    def context(self) -> dict[str, Any]:
        return {"reason": self.reason}


class MalformedWhereClause(DeriveError):
    code = "malformed-where"

    def __init__(self, value: Any) -> None:
        self.value = value
        super().__init__(f'Where clause has to be a single string: `Where = "T: Trait"`, got {value!r}.')

    def context(self) -> dict[str, Any]:
        return {"value": repr(self.value)}


class MalformedOperator(DeriveError):
    code = "malformed-operator"

    def __init__(self, kind: str, operator: Any) -> None:
        self.kind = kind
        self.operator = operator
        super().__init__(
            f"Operator of `{kind}` has to be a type name such as `Additive`, got {operator!r}."
        )

    def context(self) -> dict[str, Any]:
        return {"kind": self.kind, "operator": repr(self.operator)}


class EmptyStructureList(DeriveError):
    code = "empty-structure-list"

    def __init__(self, target: str | None = None) -> None:
        self.target = target
        super().__init__(
            "At least one trait is required to be implemented.\n"
            "Traits can be specified as `Trait(Operator, ...)` entries."
        )

    def context(self) -> dict[str, Any]:
        return {"target": self.target}


class MalformedInstantiationList(DeriveError):
    code = "malformed-instantiation"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(
            f"{detail}\nConcrete types have to be provided as `check(Type1, Type2, ...)`, "
            "one type per generic parameter, without quotes."
        )

    def context(self) -> dict[str, Any]:
        return {"detail": self.detail}


class DeclarationError(DeriveError):
    """A declaration file could not be read or has the wrong shape."""

    code = "declaration-error"


class CatalogError(DeriveError):
    """A catalog extension would make the hierarchy inconsistent."""

    code = "catalog-error"

    def __init__(self, problems: list[str]) -> None:
        self.problems = problems
        super().__init__("Inconsistent catalog:\n" + "\n".join(f"- {p}" for p in problems))

    def context(self) -> dict[str, Any]:
        return {"problems": list(self.problems)}
