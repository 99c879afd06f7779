from typing import Optional

from orionbasic.uneditable import uneditable


@uneditable
class Limits:
    """Capacity bounds and console conventions for one interpreter session."""

    def __init__(
        self,
        max_variables: int = 256,
        stack_depth: int = 32,
        max_line_length: int = 255,
        max_program_size: int = 16384,
        line_overhead: int = 100,
        max_identifier_length: int = 31,
        max_dimensions: int = 3,
        max_array_size: int = 1000,
        max_nesting: int = 64,
        print_separator: str = "     ",
        input_marker: str = "? ",
        rnd_seed: Optional[int] = None,
    ):
        self.max_variables = max_variables
        self.stack_depth = stack_depth
        self.max_line_length = max_line_length
        self.max_program_size = max_program_size
        self.line_overhead = line_overhead
        self.max_identifier_length = max_identifier_length
        self.max_dimensions = max_dimensions
        self.max_array_size = max_array_size
        self.max_nesting = max_nesting
        self.print_separator = print_separator
        self.input_marker = input_marker
        self.rnd_seed = rnd_seed

    def replace(self, **changes) -> "Limits":
        fields = {k: v for k, v in vars(self).items() if not k.startswith("_")}
        fields.update(changes)
        return Limits(**fields)

    def __repr__(self):
        fields = ", ".join(f"{k}={v!r}" for k, v in vars(self).items() if not k.startswith("_"))
        return f"Limits({fields})"


DEFAULT_LIMITS = Limits()

__all__ = ["Limits", "DEFAULT_LIMITS"]
