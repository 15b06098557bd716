"""Shopping cart store with a pluggable persistence port.

Lines are keyed by product and selected variant: adding the same pair again
merges quantities, and a quantity of zero or less removes the line. Every
mutation is saved through the persistence port.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, replace
from pathlib import Path

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    name: str
    price: float
    quantity: int
    selected_variant: str | None = None
    image: str | None = None

    @property
    def key(self) -> tuple:
        return (str(self.product_id), self.selected_variant or "")

    @property
    def line_total(self) -> float:
        return self.price * self.quantity

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Persistence port and adapters
# ---------------------------------------------------------------------------
class CartPersistence(ABC):
    @abstractmethod
    def load(self) -> list[dict]: ...

    @abstractmethod
    def save(self, lines: list[dict]) -> None: ...


class InMemoryCartPersistence(CartPersistence):
    def __init__(self, lines: list[dict] | None = None) -> None:
        self.lines = [dict(line) for line in lines or []]
        self.saves = 0

    def load(self) -> list[dict]:
        return [dict(line) for line in self.lines]

    def save(self, lines: list[dict]) -> None:
        self.lines = [dict(line) for line in lines]
        self.saves += 1


class JsonFileCartPersistence(CartPersistence):
    """Keeps the cart in a JSON file so it survives restarts."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("cart_file_unreadable", path=str(self.path), error=str(exc))
            return []
        return data.get("items", []) if isinstance(data, dict) else []

    def save(self, lines: list[dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps({"items": lines}), encoding="utf-8")


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------
class CartStore:
    def __init__(self, persistence: CartPersistence | None = None) -> None:
        self.persistence = persistence or InMemoryCartPersistence()
        self._lines: list[CartLine] = [CartLine(**line) for line in self.persistence.load()]

    @property
    def lines(self) -> list[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def _save(self) -> None:
        self.persistence.save([line.to_dict() for line in self._lines])

    def _find(self, product_id, selected_variant) -> int | None:
        key = (str(product_id), selected_variant or "")
        return next((index for index, line in enumerate(self._lines) if line.key == key), None)

    def add(self, line: CartLine) -> None:
        index = self._find(line.product_id, line.selected_variant)
        if index is None:
            self._lines.append(line)
        else:
            existing = self._lines[index]
            self._lines[index] = replace(existing, quantity=existing.quantity + line.quantity)
        self._save()

    def remove(self, product_id, selected_variant=None) -> None:
        index = self._find(product_id, selected_variant)
        if index is not None:
            del self._lines[index]
            self._save()

    def update_quantity(self, product_id, quantity: int, selected_variant=None) -> None:
        index = self._find(product_id, selected_variant)
        if index is None:
            return
        if quantity <= 0:
            del self._lines[index]
        else:
            self._lines[index] = replace(self._lines[index], quantity=quantity)
        self._save()

    def clear(self) -> None:
        self._lines = []
        self._save()

    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    def total_price(self) -> float:
        return sum(line.line_total for line in self._lines)

    def snapshot(self) -> list[dict]:
        """Detached copy of the lines, as placed on an order."""
        return [line.to_dict() for line in self._lines]
