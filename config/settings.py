"""
Settings — Default configuration values for the menu catalog seeder.

This module provides the DEFAULT_SETTINGS dict that the orchestrator uses as
fallback values when environment variables are not set. The Appwrite project,
database, bucket and collection ids have no sensible defaults and must come
from .env (see .env.example).

Configuration precedence (highest to lowest):
  1. CLI flags (--debug, --skip-images, --data)
  2. Environment variables (from .env file)
  3. DEFAULT_SETTINGS (this file)

Settings reference:
  RUN_NAME               Label used in output folder naming (e.g., "Menu_Catalog_Seed")
  APPWRITE_ENDPOINT      Appwrite API endpoint, including the /v1 suffix
  DATA_FILE              JSON catalog to seed from
  OUTPUT_DIR             Where to write run results (default: ./output)
  OUTPUT_RETENTION_DAYS  How many days to keep old output folders (0 = keep forever)
  SAVE_JSON              Whether to write seed_results.json (default: True)
  DEBUG                  Whether to print verbose output (default: False)
  SKIP_IMAGE_UPLOAD      Keep original image references and leave the bucket alone
  REQUEST_TIMEOUT        Seconds allowed for each Appwrite API call
  IMAGE_FETCH_TIMEOUT    Wall-clock seconds allowed to download one remote image
  MAX_IMAGE_BYTES        Images larger than this are not uploaded (10 MiB)
  RESET_MAX_WORKERS      Concurrent deletes per reset pass
  BUCKET_NAME            Bucket display name used by --fix-permissions
"""

RUN_NAME = "Menu_Catalog_Seed"

# Sent to image origins; some CDNs refuse requests without a browser-like agent
IMAGE_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

# Public read, signed-in users manage files
BUCKET_PERMISSIONS = [
    'read("any")',
    'create("users")',
    'update("users")',
    'delete("users")',
]

DEFAULT_SETTINGS = {
    "RUN_NAME": RUN_NAME,
    "APPWRITE_ENDPOINT": "https://nyc.cloud.appwrite.io/v1",
    "DATA_FILE": "./data/catalog.json",
    "OUTPUT_DIR": "./output",
    "OUTPUT_RETENTION_DAYS": 30,
    "SAVE_JSON": True,
    "DEBUG": False,
    "SKIP_IMAGE_UPLOAD": False,
    "REQUEST_TIMEOUT": 30,
    "IMAGE_FETCH_TIMEOUT": 30,
    "MAX_IMAGE_BYTES": 10 * 1024 * 1024,
    "RESET_MAX_WORKERS": 10,
    "BUCKET_NAME": "Food Images",
}
