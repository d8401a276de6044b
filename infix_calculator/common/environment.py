"""Variable bindings that persist across evaluations of one session."""
import string
from typing import Dict, Mapping

from pydantic import BaseModel, Field, field_validator

VARIABLE_NAMES = string.ascii_lowercase


def normalize_name(name: str) -> str:
    """
    Validate a variable name and fold it to lowercase.

    :param str name: Single ASCII letter

    :return: Lowercase name
    :rtype: str
    :raises ValueError: If the name is not a single ASCII letter
    """
    if len(name) != 1 or name not in string.ascii_letters:
        raise ValueError(f"Invalid variable name: {name!r}")
    return name.lower()


class Environment(BaseModel):
    """
    Mapping of the 26 single-letter variables to integer values.

    Unseen variables read as 0. Hosts own one environment per session and
    never share it between sessions.
    """

    bindings: Dict[str, int] = Field(default_factory=dict, description="Bound variables")

    @field_validator("bindings")
    def names_must_be_letters(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Fold keys to lowercase and reject anything that is not a letter."""
        return {normalize_name(name): value for name, value in v.items()}

    def get(self, name: str) -> int:
        return self.bindings.get(normalize_name(name), 0)

    def set(self, name: str, value: int) -> None:
        self.bindings[normalize_name(name)] = value

    def update(self, new_bindings: Mapping[str, int]) -> None:
        """Apply several bindings at once (validated before any is written)."""
        normalized = {normalize_name(name): value for name, value in new_bindings.items()}
        self.bindings.update(normalized)

    def reset(self) -> None:
        self.bindings.clear()

    def snapshot(self) -> Dict[str, int]:
        """Return a copy of the non-zero bindings, sorted by name."""
        return {name: self.bindings[name] for name in sorted(self.bindings) if self.bindings[name] != 0}
