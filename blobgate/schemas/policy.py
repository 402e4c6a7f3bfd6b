"""Policy document schema.

The stored document looks like::

    {"directories": [
        {"prefix": "public/", "read": "ANONYMOUS", "write": ["editor"]},
        {"prefix": "restricted/team/", "read": ["viewer"], "write": ["editor"]}
    ]}

Structural problems (not an object, ``directories`` not a list, a rule
without a usable ``prefix``) fail validation and the caller falls back to
the empty policy. A malformed ``read`` or ``write`` value on an otherwise
valid rule is narrowed to the empty role set: it can only ever deny.
"""

from typing import Any, FrozenSet, Literal, Tuple, Union

from pydantic import BaseModel, Field, field_validator

ANONYMOUS = "ANONYMOUS"

Anonymous = Literal["ANONYMOUS"]


def _role_set(value: Any) -> FrozenSet[str]:
    """Role list from the document, or the empty set if it is not a list of strings."""
    if isinstance(value, (list, tuple, set, frozenset)) and all(isinstance(r, str) for r in value):
        return frozenset(value)
    return frozenset()


class DirectoryRule(BaseModel):
    """Access rule for every key starting with ``prefix``."""

    prefix: str = Field(..., min_length=1)
    read: Union[Anonymous, FrozenSet[str]] = frozenset()
    write: FrozenSet[str] = frozenset()

    model_config = {"frozen": True}

    @field_validator("read", mode="before")
    @classmethod
    def coerce_read(cls, v: Any) -> Union[str, FrozenSet[str]]:
        if v == ANONYMOUS:
            return ANONYMOUS
        return _role_set(v)

    @field_validator("write", mode="before")
    @classmethod
    def coerce_write(cls, v: Any) -> FrozenSet[str]:
        return _role_set(v)

    @property
    def is_anonymous_read(self) -> bool:
        return self.read == ANONYMOUS

    @property
    def read_roles(self) -> FrozenSet[str]:
        return frozenset() if self.is_anonymous_read else self.read


class Policy(BaseModel):
    """Immutable snapshot of the access rules."""

    directories: Tuple[DirectoryRule, ...] = ()

    model_config = {"frozen": True}


EMPTY_POLICY = Policy()
