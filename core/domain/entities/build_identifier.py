"""Per-repository build counter."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class BuildIdentifier:
    """
    Monotonic build number for one repository.

    Keyed by (owner, name, provider_id). ``identifier`` is kept as a numeric
    string because it ends up in tag names and status payloads verbatim.
    """

    owner: str
    name: str
    provider_id: str
    identifier: str = "0"

    def __post_init__(self):
        if not self.identifier.isdigit():
            raise ValueError(f"Build identifier must be numeric, got: {self.identifier!r}")

    @property
    def number(self) -> int:
        return int(self.identifier)

    @property
    def key(self) -> tuple:
        return (self.owner, self.name, self.provider_id)

    def bumped(self) -> "BuildIdentifier":
        """Return the next identifier for the same repository."""
        return replace(self, identifier=str(self.number + 1))
