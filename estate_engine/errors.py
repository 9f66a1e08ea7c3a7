from __future__ import annotations


class EngineError(ValueError):
    """Base class for deterministic input failures raised by the calculators."""


class UnknownCurrencyError(EngineError):
    def __init__(self, code: str, supported=None):
        self.code = code
        self.supported = sorted(supported) if supported else []
        msg = f"unsupported currency {code!r}"
        if self.supported:
            msg += f" (rate table covers {', '.join(self.supported)})"
        super().__init__(msg)


class InvalidDebtTypeError(EngineError):
    def __init__(self, debt_id: str | None, debt_type: str | None = None):
        self.debt_id = debt_id
        self.debt_type = debt_type
        super().__init__(f"debt {debt_id!r} is not compounding; equity decay needs a compounding debt")


class InvalidInputError(EngineError):
    def __init__(self, message: str | None = None, reasons: list[str] | None = None):
        self.reasons = list(reasons or [])
        if message is None:
            message = "; ".join(self.reasons) or "invalid input"
        super().__init__(message)
