"""References from a step parameter to the result of another step."""
from typing import Optional

from attrs import define, field

__all__ = ["Address", "is_reference", "is_valid_name"]


def is_valid_name(name: str) -> bool:
    """Checks if a step name is valid.

    Valid name MUST match the following requirements:

    * have at least one character
    * first character is alphabetic [a-zA-Z]
    * last character cannot be `-`
    * any other character can be alphanumeric or `-`
    """
    if len(name) == 0:
        return False

    if not name[0].isalpha():
        return False

    if name[-1] == "-":
        return False

    return all((ch.isalnum() or ch == "-") for ch in name)


def is_reference(value: object) -> bool:
    """Checks if a raw parameter value is written as a reference (i.e.
    `:build-image#uri`)."""
    return isinstance(value, str) and value.startswith(":")


@define(frozen=True, kw_only=True, order=True)
class Address:
    """Points to the result of a step in the pipeline.

    Arguments:
        name: the name of the referenced step.
        attr: points to an attribute in the step result. Same syntax as `operator.attrgetter`.
    """

    name: str = field()
    attr: Optional[str] = field(default=None)

    @name.validator
    def check_name(self, _, value):  # pylint: disable=no-self-use
        """Validates the address' name."""
        if not is_valid_name(value):
            raise ValueError(f"invalid address name {value}")

    def __str__(self):
        if self.attr is None:
            return f":{self.name}"

        return f":{self.name}#{self.attr}"

    def __repr__(self):
        return f"Address({self.name!r}, {self.attr!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self.name == other.name

        return False

    def __hash__(self) -> int:
        return hash(self.name)

    @classmethod
    def from_string(cls, addr: str) -> "Address":
        """Creates an instance of Address from its string representation
        (i.e. `:checkout`, `:build-image#uri`).

        Arguments:
            addr: the address to convert.

        Returns:
            The address represented by the given string.

        Raises:
            ValueError: if the address is invalid.
        """
        if not addr.startswith(":"):
            raise ValueError(f"invalid address format {addr}")

        name, _, attr = addr[1:].partition("#")

        return Address(
            name=name,
            attr=attr if attr else None,
        )

    @property
    def without_attr(self) -> "Address":
        """Returns the address without the attr part."""
        return Address(name=self.name)
