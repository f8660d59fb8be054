"""
Core package — The seeding pipeline modules.

This package contains all the modules that reset and repopulate the Appwrite
catalog. Each module handles one concern:

  orchestrator.py        Configuration, wiring, results output, seed() entry point
  catalog_linker.py      The seed sequence (Steps 1-6) and SeedingSummary
  reset_manager.py       Clearing collections and the image bucket (Step 1)
  image_ingestion.py     Re-hosting remote menu images (Step 4)
  appwrite_client.py     HTTP communication with Appwrite
  dataset.py             Catalog dataclasses and JSON loading
  storage_diagnostics.py Bucket access checks and permission fix
  output_manager.py      Timestamped result folders
  exceptions.py          Error types
"""

from .orchestrator import SeedOrchestrator, seed
from .catalog_linker import CatalogLinker, SeedingSummary
from .reset_manager import ResetManager
from .image_ingestion import ImageIngestionWorker, ImageResolution
from .appwrite_client import AppwriteClient, unique_id
from .dataset import Category, Customization, MenuItem, CatalogDataset, load_dataset
from .storage_diagnostics import StorageDiagnostics, StorageCheckResult
from .output_manager import OutputManager
from .exceptions import (
    SeedError,
    DatasetError,
    AppwriteAPIError,
    ResetFailure,
    CatalogCreationFailure,
    ImageIngestionFailure,
)
