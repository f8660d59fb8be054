"""
Dataset — The static catalog the seeder writes into Appwrite.

The catalog is a JSON file with three lists:

    {
      "categories":     [ {"name": "Burgers", "description": "..."} ],
      "customizations": [ {"name": "Extra Cheese", "price": 25, "type": "topping"} ],
      "menu": [
        {
          "name": "Classic Cheeseburger",
          "description": "...",
          "image_url": "burger-one.png" | "https://...",
          "price": 25.99, "rating": 4.5, "calories": 550, "protein": 25,
          "category_name": "Burgers",
          "customizations": ["Extra Cheese", "Fries"]
        }
      ]
    }

Menu items reference their category and customizations by name. Names are
assumed unique within each list; nothing here enforces it.

Pipeline context:
    Loaded once by the orchestrator and handed to CatalogLinker. Read-only.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from .exceptions import DatasetError


@dataclass(frozen=True)
class Category:
    name: str
    description: str

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "description": self.description}


@dataclass(frozen=True)
class Customization:
    name: str
    price: float
    # Open set: topping, side, size, crust, bread, spice, base, sauce, ...
    type: str

    def to_document(self) -> Dict[str, Any]:
        return {"name": self.name, "price": self.price, "type": self.type}


@dataclass(frozen=True)
class MenuItem:
    name: str
    description: str
    image_url: str
    price: float
    rating: float
    calories: int
    protein: int
    category_name: str
    customizations: List[str] = field(default_factory=list)

    def to_document(self, image_url: str, category_id: str) -> Dict[str, Any]:
        """Build the menu document with a resolved image and category id."""
        return {
            "name": self.name,
            "description": self.description,
            "image_url": image_url,
            "price": self.price,
            "rating": self.rating,
            "calories": self.calories,
            "protein": self.protein,
            "categories": category_id,
        }


@dataclass(frozen=True)
class CatalogDataset:
    categories: List[Category] = field(default_factory=list)
    customizations: List[Customization] = field(default_factory=list)
    menu: List[MenuItem] = field(default_factory=list)


_REQUIRED_KEYS = {
    "categories": ("name", "description"),
    "customizations": ("name", "price", "type"),
    "menu": (
        "name", "description", "image_url", "price", "rating",
        "calories", "protein", "category_name",
    ),
}


def _check_menu_types(index: int, entry: Dict[str, Any]) -> None:
    for key in ("name", "image_url", "category_name"):
        if not isinstance(entry[key], str):
            raise DatasetError(f"menu[{index}].{key} must be a string")
    names = entry.get("customizations", [])
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise DatasetError(f"menu[{index}].customizations must be a list of names")


def parse_dataset(raw: Dict[str, Any]) -> CatalogDataset:
    """Build a CatalogDataset from the decoded JSON document.

    Raises:
        DatasetError: If a section is not a list, an entry lacks a required key,
            or a menu item field has the wrong type.
    """
    if not isinstance(raw, dict):
        raise DatasetError("Catalog must be a JSON object")

    for section, keys in _REQUIRED_KEYS.items():
        entries = raw.get(section, [])
        if not isinstance(entries, list):
            raise DatasetError(f"'{section}' must be a list")
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise DatasetError(f"{section}[{index}] must be an object")
            missing = [k for k in keys if k not in entry]
            if missing:
                raise DatasetError(f"{section}[{index}] is missing: {', '.join(missing)}")
            if section == "menu":
                _check_menu_types(index, entry)

    categories = [
        Category(name=c["name"], description=c["description"])
        for c in raw.get("categories", [])
    ]
    customizations = [
        Customization(name=c["name"], price=c["price"], type=c["type"])
        for c in raw.get("customizations", [])
    ]
    menu = [
        MenuItem(
            name=m["name"],
            description=m["description"],
            image_url=m["image_url"],
            price=m["price"],
            rating=m["rating"],
            calories=m["calories"],
            protein=m["protein"],
            category_name=m["category_name"],
            customizations=list(m.get("customizations", [])),
        )
        for m in raw.get("menu", [])
    ]
    return CatalogDataset(categories=categories, customizations=customizations, menu=menu)


def load_dataset(path: Union[str, Path]) -> CatalogDataset:
    """Load and validate the catalog JSON file.

    Raises:
        DatasetError: If the file is missing, not valid JSON, or malformed.
    """
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise DatasetError(f"Catalog file not found: {path}")
    except json.JSONDecodeError as e:
        raise DatasetError(f"Catalog file {path} is not valid JSON: {e}")
    return parse_dataset(raw)
