"""Error types raised by selector resolution."""

from s_eval.core.errors import SEvalError


class SelectorResolutionError(SEvalError):
    """Raised when a selector references unknown functions or cases.

    ``invalid`` lists every offending identifier, collected before raising.
    """

    def __init__(self, invalid: list[str], reason: str = "unknown identifiers") -> None:
        self.invalid = invalid
        super().__init__(
            f"Failed to resolve selector: {reason}: {', '.join(invalid)}"
        )
