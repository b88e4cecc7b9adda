from enum import Enum


class InvalidOperatorError(ValueError):
    pass


class CompareOp(Enum):
    GT = ">"
    GE = ">="
    LT = "<"
    LE = "<="
    EQ = "=="
    NE = "!="

    @classmethod
    def parse(cls, op) -> "CompareOp":
        """Accept a member or its symbol; anything else is a programming error."""
        if isinstance(op, cls):
            return op
        try:
            return cls(op)
        except ValueError:
            raise InvalidOperatorError(f"Unknown operator {op!r}") from None

    def apply(self, a, b) -> bool:
        if self is CompareOp.GT: return a > b
        if self is CompareOp.GE: return a >= b
        if self is CompareOp.LT: return a < b
        if self is CompareOp.LE: return a <= b
        if self is CompareOp.EQ: return a == b
        if self is CompareOp.NE: return a != b
        raise InvalidOperatorError(f"Unhandled operator {self!r}")

    def __str__(self):
        return self.value
