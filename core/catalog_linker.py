"""
Catalog Linker — Runs the reset-then-repopulate sequence against Appwrite.

seed() performs six steps, strictly one after another:

  Step 1: RESET
      Clear menu_customizations, menu, customizations and categories (link
      rows first so no join row ever points at a deleted parent), then the
      image bucket unless image upload is skipped.

  Step 2: CATEGORIES
      Create each category in dataset order; record name -> $id.

  Step 3: CUSTOMIZATIONS
      Same for customizations.

  Step 4: MENU ITEMS
      For each item: resolve its image (or keep it as-is when skipping
      uploads), look up its category id, create the menu document, then
      immediately create its links (Step 5) before moving to the next item.
      An unknown category name is fatal.

  Step 5: LINKS
      For each customization name on the item, create a
      {menu, customizations} join document. Names missing from the
      customization map are skipped with a warning.

  Step 6: VERIFY
      Re-read document totals for menu, customizations and links from Appwrite
      and report them next to the counts this run created.

The name -> id maps are created by the step that fills them and passed
explicitly to the steps that read them; nothing is kept on the instance
between runs.

Failures in Steps 1-4 raise (ResetFailure / CatalogCreationFailure) and abort
the run. Missing link targets and degraded images only show up as warnings
and summary counts.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, List, Optional, Tuple

from .appwrite_client import AppwriteClient
from .dataset import CatalogDataset, MenuItem
from .exceptions import CatalogCreationFailure
from .image_ingestion import ImageIngestionWorker, UPLOADED, DEGRADED, LOCAL
from .reset_manager import ResetManager

# Keys of the collection id mapping passed to CatalogLinker
CATEGORIES = "categories"
CUSTOMIZATIONS = "customizations"
MENU = "menu"
MENU_CUSTOMIZATIONS = "menu_customizations"

COLLECTION_KEYS = (CATEGORIES, CUSTOMIZATIONS, MENU, MENU_CUSTOMIZATIONS)

# Dependents before parents
RESET_ORDER = (MENU_CUSTOMIZATIONS, MENU, CUSTOMIZATIONS, CATEGORIES)


@dataclass
class SeedingSummary:
    """Counts collected during one seed() run."""

    skip_image_upload: bool = False
    documents_deleted: Dict[str, int] = field(default_factory=dict)
    files_deleted: Optional[int] = None
    categories_created: int = 0
    customizations_created: int = 0
    menu_items_created: int = 0
    links_created: int = 0
    images_uploaded: int = 0
    images_degraded: int = 0
    images_local: int = 0
    images_skipped: int = 0
    link_warnings: List[str] = field(default_factory=list)
    remote_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def verified(self) -> bool:
        """True when Appwrite's totals match what this run created."""
        return (
            self.remote_counts.get(MENU) == self.menu_items_created
            and self.remote_counts.get(CUSTOMIZATIONS) == self.customizations_created
            and self.remote_counts.get(MENU_CUSTOMIZATIONS) == self.links_created
        )

    def to_dict(self) -> Dict:
        result = asdict(self)
        result["verified"] = self.verified
        return result


class CatalogLinker:
    """Seeds the catalog collections from a CatalogDataset.

    Attributes:
        client: AppwriteClient for document creation and counts.
        dataset: The catalog to write.
        collections: Mapping of CATEGORIES/CUSTOMIZATIONS/MENU/MENU_CUSTOMIZATIONS
            to Appwrite collection ids.
        reset_manager: Clears collections and the bucket in Step 1.
        image_worker: Resolves image references in Step 4.
        debug: Enable verbose output.
    """

    def __init__(
        self,
        client: AppwriteClient,
        dataset: CatalogDataset,
        collections: Dict[str, str],
        reset_manager: ResetManager,
        image_worker: ImageIngestionWorker,
        debug: bool = False,
    ):
        missing = [key for key in COLLECTION_KEYS if not collections.get(key)]
        if missing:
            raise ValueError(f"Missing collection ids: {', '.join(missing)}")

        self.client = client
        self.dataset = dataset
        self.collections = collections
        self.reset_manager = reset_manager
        self.image_worker = image_worker
        self.debug = debug

    def seed(self, skip_image_upload: bool = False) -> SeedingSummary:
        """Reset the catalog and write the dataset into Appwrite.

        Args:
            skip_image_upload: Keep every image_url as declared and leave the
                bucket untouched (no storage calls at all).

        Returns:
            SeedingSummary with created, deleted and verified counts.

        Raises:
            ResetFailure: A delete failed in Step 1.
            CatalogCreationFailure: A category, customization, menu item or
                link could not be created, or a menu item names an unknown
                category.
        """
        summary = SeedingSummary(skip_image_upload=skip_image_upload)

        _banner("STEP 1: RESET")
        self._reset(summary)

        _banner("STEP 2: CATEGORIES")
        category_map = self._create_categories()
        summary.categories_created = len(self.dataset.categories)

        _banner("STEP 3: CUSTOMIZATIONS")
        customization_map = self._create_customizations()
        summary.customizations_created = len(self.dataset.customizations)

        _banner("STEPS 4-5: MENU ITEMS AND LINKS")
        self._create_menu_items(category_map, customization_map, summary)
        summary.menu_items_created = len(self.dataset.menu)

        _banner("STEP 6: VERIFY")
        summary.remote_counts = self._verify()
        print(f"  Categories: {summary.categories_created}")
        print(f"  Customizations: {summary.customizations_created} "
              f"(remote: {summary.remote_counts[CUSTOMIZATIONS]})")
        print(f"  Menu Items: {summary.menu_items_created} "
              f"(remote: {summary.remote_counts[MENU]})")
        print(f"  Menu-Customization Links: {summary.links_created} "
              f"(remote: {summary.remote_counts[MENU_CUSTOMIZATIONS]})")
        if not summary.verified:
            print("  WARNING: Remote counts differ from what this run created")

        return summary

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _reset(self, summary: SeedingSummary) -> None:
        order = [self.collections[key] for key in RESET_ORDER]
        summary.documents_deleted = self.reset_manager.clear_all(order)
        if summary.skip_image_upload:
            print("  Skipping storage reset (image upload disabled)")
        else:
            summary.files_deleted = self.reset_manager.clear_storage()

    def _create_categories(self) -> Dict[str, str]:
        category_map: Dict[str, str] = {}
        for category in self.dataset.categories:
            doc = self._create(CATEGORIES, "category", category.name, category.to_document())
            category_map[category.name] = doc["$id"]
            print(f"  Created category: {category.name}")
        return category_map

    def _create_customizations(self) -> Dict[str, str]:
        customization_map: Dict[str, str] = {}
        for customization in self.dataset.customizations:
            doc = self._create(
                CUSTOMIZATIONS, "customization", customization.name, customization.to_document()
            )
            customization_map[customization.name] = doc["$id"]
            print(f"  Created customization: {customization.name}")
        return customization_map

    def _create_menu_items(
        self,
        category_map: Dict[str, str],
        customization_map: Dict[str, str],
        summary: SeedingSummary,
    ) -> None:
        for item in self.dataset.menu:
            category_id = category_map.get(item.category_name)
            if category_id is None:
                raise CatalogCreationFailure(
                    "menu item", item.name, f"unknown category '{item.category_name}'"
                )

            image_url = self._resolve_image(item, summary)
            doc = self._create(MENU, "menu item", item.name, item.to_document(image_url, category_id))
            print(f"  Created menu item: {item.name}")

            created, warnings = self._link_customizations(item, doc["$id"], customization_map)
            summary.links_created += created
            summary.link_warnings.extend(warnings)

    def _resolve_image(self, item: MenuItem, summary: SeedingSummary) -> str:
        if summary.skip_image_upload:
            if self.debug:
                print(f"  Skipping image upload for: {item.name}, using original URL")
            summary.images_skipped += 1
            return item.image_url

        resolution = self.image_worker.ingest(item.image_url)
        if resolution.status == UPLOADED:
            summary.images_uploaded += 1
        elif resolution.status == DEGRADED:
            summary.images_degraded += 1
        elif resolution.status == LOCAL:
            summary.images_local += 1
        return resolution.reference

    def _link_customizations(
        self,
        item: MenuItem,
        menu_id: str,
        customization_map: Dict[str, str],
    ) -> Tuple[int, List[str]]:
        """Step 5 for one menu item. Returns (links created, warnings)."""
        created = 0
        warnings: List[str] = []
        for name in item.customizations:
            customization_id = customization_map.get(name)
            if customization_id is None:
                warning = f"Customization '{name}' not found for menu item '{item.name}'"
                print(f"  WARNING: {warning}")
                warnings.append(warning)
                continue

            self._create(
                MENU_CUSTOMIZATIONS,
                "menu customization link",
                f"{item.name} -> {name}",
                {"menu": menu_id, "customizations": customization_id},
            )
            created += 1
            if self.debug:
                print(f"    Linked {name} to {item.name}")
        return created, warnings

    def _verify(self) -> Dict[str, int]:
        return {
            key: self.client.count_documents(self.collections[key])
            for key in (MENU, CUSTOMIZATIONS, MENU_CUSTOMIZATIONS)
        }

    def _create(self, key: str, kind: str, name: str, data: Dict) -> Dict:
        try:
            return self.client.create_document(self.collections[key], data)
        except Exception as e:
            raise CatalogCreationFailure(kind, name, e) from e


def _banner(title: str) -> None:
    print(f"\n{'='*60}")
    print(title)
    print("="*60)
