from __future__ import annotations

import logging
from typing import Any
from typing import NamedTuple
from typing import Optional


log = logging.getLogger(__name__)


class Answer(NamedTuple):
    """
    An answer as computed by a solver. adventofcode.com only ever sees the `text`;
    `number` is the integer form of the text, when it has one, and is what the
    bounds learned from "too high" / "too low" replies are checked against.
    """

    text: str
    number: Optional[int] = None

    def __str__(self):
        return self.text

    @classmethod
    def of(cls, value: Any) -> Answer | None:
        """Coerce a solver's return value. Returns None for the no-answer sentinels."""
        if isinstance(value, Answer):
            return value
        if value is None:
            return None
        if isinstance(value, (str, bytes)) and not value.strip():
            return None
        text = _coerce_val(value)
        try:
            number = int(text)
        except ValueError:
            number = None
        return cls(text, number)


def _coerce_val(val):
    # technically adventofcode.com will only accept strings as answers.
    # but it's convenient to be able to return numbers, since many of the answers
    # are numeric strings. coerce the values to string safely.
    orig_val = val
    orig_type = type(val)
    coerced = False
    floatish = isinstance(val, (float, complex))
    if floatish and val.imag == 0.0 and val.real.is_integer():
        coerced = True
        val = int(val.real)
    elif orig_type.__module__ == "numpy" and getattr(val, "ndim", None) == 0:
        # deal with numpy scalars
        if orig_type.__name__.startswith(("int", "uint", "long", "ulong")):
            coerced = True
            val = int(orig_val)
        elif orig_type.__name__.startswith(("float", "complex")):
            if val.imag == 0.0 and float(val.real).is_integer():
                coerced = True
                val = int(val.real)
    if isinstance(val, bytes):
        val = val.decode()
    if not isinstance(val, str):
        val = str(val)
    if coerced:
        log.warning("coerced %s value %r", orig_type.__name__, orig_val)
    return val
