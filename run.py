#!/usr/bin/env python3
"""
Menu Catalog Seeder — Entry Point.

Resets the Appwrite catalog (categories, customizations, menu items and their
links, plus the image bucket) and repopulates it from a local JSON catalog.

The seed sequence (managed by CatalogLinker) performs 6 steps:
  1. Clear the four catalog collections and, unless skipped, the image bucket
  2. Create categories
  3. Create customizations
  4. Create menu items, re-hosting remote images in the bucket
  5. Link each menu item to its customizations
  6. Re-count documents in Appwrite and compare with what was created

Usage:
    python run.py                        # Full seed, images uploaded
    python run.py --skip-images          # Keep image URLs as-is, leave the bucket alone
    python run.py --data ./other.json    # Seed from another catalog file
    python run.py --debug                # Verbose output
    python run.py --check-storage        # Check that stored images are viewable
    python run.py --debug-image FILE_ID  # Check one file's view URL
    python run.py --fix-permissions      # Make the bucket publicly readable
    python run.py --version              # Show version
"""

import sys
import argparse
from pathlib import Path

from core import SeedOrchestrator

# Read version from the repo-root VERSION file (e.g., "0.1.0").
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
VERSION = VERSION_FILE.read_text().strip() if VERSION_FILE.exists() else "unknown"


def run_diagnostics(orchestrator: SeedOrchestrator, args) -> bool:
    """Run the requested storage checks. Returns True if all succeeded."""
    diagnostics = orchestrator.build_diagnostics()
    ok = True

    if args.fix_permissions:
        ok = diagnostics.fix_bucket_permissions(orchestrator.bucket_name).success and ok
    if args.check_storage:
        access = diagnostics.check_access()
        if access.success:
            diagnostics.get_info()
        ok = access.success and ok
    if args.debug_image:
        ok = diagnostics.debug_image_url(args.debug_image).success and ok

    return ok


def main():
    """Parse CLI arguments and run the seeder."""
    parser = argparse.ArgumentParser(
        description="Menu Catalog Seeder - Reset and repopulate the Appwrite food catalog"
    )
    parser.add_argument("--env", "-e", default="./.env", help="Path to .env file")
    parser.add_argument("--data", "-d", help="Override catalog JSON path")
    parser.add_argument("--skip-images", action="store_true", help="Skip image upload and bucket reset")
    parser.add_argument("--debug", action="store_true", help="Enable debug output")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")

    storage_group = parser.add_argument_group("storage diagnostics (no seeding)")
    storage_group.add_argument("--check-storage", action="store_true", help="List bucket files and test view access")
    storage_group.add_argument("--debug-image", metavar="FILE_ID", help="Test one file's view URL")
    storage_group.add_argument("--fix-permissions", action="store_true", help="Set public read on the bucket")

    args = parser.parse_args()

    if args.version:
        print(f"menu-catalog-seeder {VERSION}")
        sys.exit(0)

    # Initialize the orchestrator (loads .env and builds internal config)
    orchestrator = SeedOrchestrator(env_file=args.env)

    # Apply CLI overrides on top of .env values
    if args.debug:
        orchestrator.debug = True
    if args.skip_images:
        orchestrator.skip_image_upload = True
    if args.data:
        orchestrator.data_file = args.data

    if not orchestrator.validate_config():
        sys.exit(1)

    if args.check_storage or args.debug_image or args.fix_permissions:
        print(f"\n{'='*60}")
        print(f"STORAGE DIAGNOSTICS v{VERSION}")
        print("="*60)
        sys.exit(0 if run_diagnostics(orchestrator, args) else 1)

    # Print header
    print(f"\n{'='*60}")
    print(f"MENU CATALOG SEEDER v{VERSION}")
    print("="*60)
    print(f"Endpoint: {orchestrator.endpoint}")
    print(f"Catalog: {orchestrator.data_file}")
    print(f"Image Upload: {'Disabled' if orchestrator.skip_image_upload else 'Enabled'}")

    # Cleanup old output folders based on retention policy
    if orchestrator.save_json and orchestrator.output_manager.retention_days > 0:
        deleted = orchestrator.output_manager.cleanup_old_folders(orchestrator.debug)
        if deleted > 0:
            print(f"Cleaned up {deleted} old output folder(s)")

    results = orchestrator.run()

    orchestrator.print_summary(results)

    if not results.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
