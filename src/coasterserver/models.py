"""
Coaster record and its JSON mapping.

Wire shape (all fields are strings):

    {"name": "Fury", "id": "4821", "manufacturer": "B&M", "inpark": "Carowinds"}

Decoding is lenient about keys and strict about values:

    - keys match field names case-insensitively ("inPark" fills in_park);
      when several keys match one field, the last one wins
    - unknown keys are ignored, missing keys decode to ""
    - a value that is neither a string nor null is rejected
    - the top-level value must be an object (null decodes to an empty record)
    - unpaired UTF-16 surrogates ("\\ud800") become U+FFFD so every stored
      value can be encoded as UTF-8 again
"""

from dataclasses import dataclass, asdict, replace
from typing import Any, Dict


# Python attribute -> JSON field name
_WIRE_NAMES = {
    "name": "name",
    "id": "id",
    "manufacturer": "manufacturer",
    "in_park": "inpark",
}


@dataclass(frozen=True)
class Coaster:
    """A roller-coaster record. Immutable once stored."""

    name: str = ""
    id: str = ""
    manufacturer: str = ""
    in_park: str = ""

    def with_id(self, coaster_id: str) -> "Coaster":
        """Return a copy carrying the server-assigned id."""
        return replace(self, id=coaster_id)

    def to_dict(self) -> Dict[str, str]:
        """Convert to the JSON wire shape."""
        return {_WIRE_NAMES[attr]: value for attr, value in asdict(self).items()}

    @classmethod
    def from_dict(cls, data: Any) -> "Coaster":
        """
        Build a Coaster from decoded JSON.

        Raises:
            TypeError: If the payload is not an object or a field value is
                       not a string.
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise TypeError(
                f"cannot decode {type(data).__name__} into a coaster object"
            )

        by_wire_name = {wire: attr for attr, wire in _WIRE_NAMES.items()}
        fields: Dict[str, str] = {}

        for key, value in data.items():
            attr = by_wire_name.get(key.lower())
            if attr is None or value is None:
                continue
            if not isinstance(value, str):
                raise TypeError(
                    f"field '{key}' must be a string, got {type(value).__name__}"
                )
            fields[attr] = _replace_lone_surrogates(value)

        return cls(**fields)


def _replace_lone_surrogates(value: str) -> str:
    """'\\ud800' -> '\\ufffd'; valid text passes through unchanged."""
    return value.encode("utf-16", "surrogatepass").decode("utf-16", "replace")
