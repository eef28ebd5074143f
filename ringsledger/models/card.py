from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class RingsPack:
    """A pack from the card database catalog."""

    code: str
    name: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RingsPack":
        return cls(code=str(data["code"]), name=str(data["name"]))


@dataclass(frozen=True, slots=True)
class RingsCard:
    """
    A card record from the card database.

    Attributes:
        code: Card code, unique across packs (e.g., "01001")
        name: Display name
        pack_code: Pack the card belongs to
        type_code: hero, ally, attachment, event, ... (None if unknown)
        sphere_code: leadership, lore, spirit, tactics, neutral, ...
        cost: Resource cost; may be "X" or None
        threat: Starting threat (heroes only)
    """

    code: str
    name: str
    pack_code: str = ""
    pack_name: str = ""
    type_code: str | None = None
    type_name: str | None = None
    sphere_code: str | None = None
    sphere_name: str | None = None
    cost: int | str | None = None
    threat: int | None = None
    willpower: int | None = None
    attack: int | None = None
    defense: int | None = None
    health: int | None = None
    traits: str | None = None
    text: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "RingsCard":
        """Build a card from an API record, ignoring fields we don't track."""
        return cls(
            code=str(data["code"]),
            name=str(data.get("name", "")),
            pack_code=str(data.get("pack_code", "")),
            pack_name=str(data.get("pack_name", "")),
            type_code=data.get("type_code"),
            type_name=data.get("type_name"),
            sphere_code=data.get("sphere_code"),
            sphere_name=data.get("sphere_name"),
            cost=data.get("cost"),
            threat=data.get("threat"),
            willpower=data.get("willpower"),
            attack=data.get("attack"),
            defense=data.get("defense"),
            health=data.get("health"),
            traits=data.get("traits"),
            text=data.get("text"),
        )
