"""
Seed Orchestrator — Configuration, wiring and reporting around a seed run.

This module loads configuration from the environment, builds the pipeline
pieces and hands control to CatalogLinker.seed():

  AppwriteClient         REST access to the database and storage bucket
  ResetManager           Step 1 (clear collections and bucket)
  ImageIngestionWorker   Step 4 image re-hosting
  CatalogLinker          Steps 1-6, the actual seed sequence

run() is the top-level caller of seed(): a fatal error (reset failure,
creation failure, bad dataset) stops the run, is printed, and is recorded in
the returned results dict with success=False. When SAVE_JSON is enabled the
results are written to seed_results.json in a timestamped output folder.

Configuration:
    All settings are loaded from environment variables (typically via .env file).
    Required: APPWRITE_PROJECT_ID, APPWRITE_API_KEY, APPWRITE_DATABASE_ID,
    APPWRITE_BUCKET_ID and the four APPWRITE_*_COLLECTION_ID values.
    See config/settings.py for defaults.

Typical usage:
    orchestrator = SeedOrchestrator(env_file="./.env")
    if orchestrator.validate_config():
        results = orchestrator.run()
        orchestrator.print_summary(results)

Or, to let errors propagate:
    summary = seed(skip_image_upload=True)
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any, Optional

from dotenv import load_dotenv

from config import DEFAULT_SETTINGS

from .appwrite_client import AppwriteClient
from .catalog_linker import (
    CatalogLinker,
    SeedingSummary,
    CATEGORIES,
    CUSTOMIZATIONS,
    MENU,
    MENU_CUSTOMIZATIONS,
)
from .dataset import load_dataset
from .image_ingestion import ImageIngestionWorker
from .output_manager import OutputManager
from .reset_manager import ResetManager
from .storage_diagnostics import StorageDiagnostics

# Environment variable holding each collection id
COLLECTION_ENV_VARS = {
    CATEGORIES: "APPWRITE_CATEGORIES_COLLECTION_ID",
    CUSTOMIZATIONS: "APPWRITE_CUSTOMIZATIONS_COLLECTION_ID",
    MENU: "APPWRITE_MENU_COLLECTION_ID",
    MENU_CUSTOMIZATIONS: "APPWRITE_MENU_CUSTOMIZATIONS_COLLECTION_ID",
}


def _env_bool(name: str) -> bool:
    return os.getenv(name, str(DEFAULT_SETTINGS[name])).lower() == "true"


def _env_int(name: str) -> int:
    return int(os.getenv(name, str(DEFAULT_SETTINGS[name])))


class SeedOrchestrator:
    """Builds the seeding pipeline from configuration and runs it.

    Attributes:
        endpoint: Appwrite endpoint (e.g., "https://nyc.cloud.appwrite.io/v1").
        project_id / api_key / database_id / bucket_id: Appwrite identifiers.
        collections: Logical collection key -> Appwrite collection id.
        data_file: Path of the catalog JSON.
        skip_image_upload: Keep original image references, no storage calls.
        save_json: Whether to write seed_results.json.
        debug: Whether to enable verbose output.
        output_manager: Handles timestamped output directories and retention cleanup.
    """

    def __init__(self, env_file: str = "./.env"):
        """Initialize the orchestrator by loading configuration from environment.

        Args:
            env_file: Path to a .env file. If the file exists, it is loaded via
                      python-dotenv. Otherwise, falls back to system environment.
        """
        env_path = Path(env_file)
        if env_path.exists():
            load_dotenv(env_path)
            print(f"Loaded configuration from: {env_file}")
        else:
            print(f"Warning: {env_file} not found, using defaults/environment")

        # Appwrite project (required except endpoint)
        self.endpoint = os.getenv("APPWRITE_ENDPOINT", DEFAULT_SETTINGS["APPWRITE_ENDPOINT"])
        self.project_id = os.getenv("APPWRITE_PROJECT_ID", "")
        self.api_key = os.getenv("APPWRITE_API_KEY", "")
        self.database_id = os.getenv("APPWRITE_DATABASE_ID", "")
        self.bucket_id = os.getenv("APPWRITE_BUCKET_ID", "")
        self.collections = {key: os.getenv(var, "") for key, var in COLLECTION_ENV_VARS.items()}

        self.data_file = os.getenv("DATA_FILE", DEFAULT_SETTINGS["DATA_FILE"])
        self.bucket_name = os.getenv("BUCKET_NAME", DEFAULT_SETTINGS["BUCKET_NAME"])

        # Processing options
        self.skip_image_upload = _env_bool("SKIP_IMAGE_UPLOAD")
        self.save_json = _env_bool("SAVE_JSON")
        self.debug = _env_bool("DEBUG")
        self.request_timeout = _env_int("REQUEST_TIMEOUT")
        self.image_fetch_timeout = _env_int("IMAGE_FETCH_TIMEOUT")
        self.max_image_bytes = _env_int("MAX_IMAGE_BYTES")
        self.reset_max_workers = _env_int("RESET_MAX_WORKERS")

        run_name = os.getenv("RUN_NAME", DEFAULT_SETTINGS["RUN_NAME"])
        output_dir = os.getenv("OUTPUT_DIR", DEFAULT_SETTINGS["OUTPUT_DIR"])
        retention_days = _env_int("OUTPUT_RETENTION_DAYS")
        self.output_manager = OutputManager(output_dir, run_name, retention_days)

    def validate_config(self) -> bool:
        """Check that every required value is present.

        Returns:
            True if all required values are present, False otherwise.
            Prints one line per missing value.
        """
        errors = []
        if not self.endpoint:
            errors.append("APPWRITE_ENDPOINT is required")
        if not self.project_id:
            errors.append("APPWRITE_PROJECT_ID is required")
        if not self.api_key:
            errors.append("APPWRITE_API_KEY is required")
        if not self.database_id:
            errors.append("APPWRITE_DATABASE_ID is required")
        if not self.bucket_id:
            errors.append("APPWRITE_BUCKET_ID is required")
        for key, var in COLLECTION_ENV_VARS.items():
            if not self.collections[key]:
                errors.append(f"{var} is required")

        if errors:
            print("\nConfiguration Errors:")
            for err in errors:
                print(f"  - {err}")
            return False
        return True

    def build_client(self) -> AppwriteClient:
        return AppwriteClient(
            self.endpoint,
            self.project_id,
            self.api_key,
            self.database_id,
            self.bucket_id,
            timeout=self.request_timeout,
            debug=self.debug,
        )

    def build_linker(self, client: Optional[AppwriteClient] = None) -> CatalogLinker:
        """Load the dataset and wire a CatalogLinker.

        Raises:
            DatasetError: If the catalog file is missing or malformed.
        """
        client = client or self.build_client()
        dataset = load_dataset(self.data_file)
        if self.debug:
            print(f"  Loaded {len(dataset.categories)} categories, "
                  f"{len(dataset.customizations)} customizations, "
                  f"{len(dataset.menu)} menu items from {self.data_file}")
        return CatalogLinker(
            client,
            dataset,
            self.collections,
            ResetManager(client, max_workers=self.reset_max_workers, debug=self.debug),
            ImageIngestionWorker(
                client,
                fetch_timeout=self.image_fetch_timeout,
                max_bytes=self.max_image_bytes,
                debug=self.debug,
            ),
            debug=self.debug,
        )

    def build_diagnostics(self) -> StorageDiagnostics:
        return StorageDiagnostics(self.build_client(), timeout=self.request_timeout, debug=self.debug)

    def seed(self) -> SeedingSummary:
        """Run the seed sequence and let any fatal error propagate."""
        return self.build_linker().seed(skip_image_upload=self.skip_image_upload)

    def run(self) -> Dict[str, Any]:
        """Execute a seed run and collect its results.

        Returns:
            A dict containing:
                - started_at/completed_at: ISO timestamps
                - config: endpoint, data file and image mode
                - success: True if every step completed
                - summary: SeedingSummary.to_dict() (on success)
                - results_path: where the results were written (if save_json=True)
                - error: Error message (if success=False)
        """
        results = {
            "started_at": datetime.now(timezone.utc).isoformat(),
            "config": {
                "endpoint": self.endpoint,
                "data_file": self.data_file,
                "skip_image_upload": self.skip_image_upload,
            },
            "success": False,
        }

        try:
            summary = self.seed()
            results["success"] = True
            results["summary"] = summary.to_dict()
        except Exception as e:
            results["error"] = str(e)
            print(f"\n  ERROR: {e}")
            if self.debug:
                import traceback
                traceback.print_exc()

        results["completed_at"] = datetime.now(timezone.utc).isoformat()

        if self.save_json:
            self.output_manager.create_run_dir()
            results_path = self.output_manager.write_json("seed_results.json", results)
            results["results_path"] = str(results_path)
            print(f"\n  Results saved to: {results_path}")

        return results

    def print_summary(self, results: Dict):
        """Print a human-readable execution summary.

        Args:
            results: The dict returned by run().
        """
        print(f"\n{'='*60}")
        print("SEEDING COMPLETE")
        print("="*60)
        print(f"Status: {'SUCCESS' if results.get('success') else 'FAILED'}")

        summary = results.get("summary", {})
        if summary:
            remote = summary.get("remote_counts", {})
            print(f"Categories: {summary.get('categories_created', 0)}")
            print(f"Customizations: {summary.get('customizations_created', 0)} "
                  f"(remote: {remote.get(CUSTOMIZATIONS, 'N/A')})")
            print(f"Menu Items: {summary.get('menu_items_created', 0)} "
                  f"(remote: {remote.get(MENU, 'N/A')})")
            print(f"Menu-Customization Links: {summary.get('links_created', 0)} "
                  f"(remote: {remote.get(MENU_CUSTOMIZATIONS, 'N/A')})")
            if summary.get("skip_image_upload"):
                print(f"Images: skipped ({summary.get('images_skipped', 0)} kept as declared)")
            else:
                print(f"Images: {summary.get('images_uploaded', 0)} uploaded, "
                      f"{summary.get('images_degraded', 0)} fell back to original, "
                      f"{summary.get('images_local', 0)} local assets")
            warnings = summary.get("link_warnings", [])
            if warnings:
                print(f"Link warnings: {len(warnings)}")
                for warning in warnings:
                    print(f"  - {warning}")

        if results.get("error"):
            print(f"Error: {results['error']}")


def seed(skip_image_upload: bool = False, env_file: str = "./.env") -> SeedingSummary:
    """Seed the catalog using configuration from env_file / the environment.

    Raises:
        ValueError: If required configuration is missing.
        ResetFailure, CatalogCreationFailure, DatasetError: On fatal errors.
    """
    orchestrator = SeedOrchestrator(env_file=env_file)
    orchestrator.skip_image_upload = skip_image_upload
    if not orchestrator.validate_config():
        raise ValueError("Incomplete Appwrite configuration")
    return orchestrator.seed()
