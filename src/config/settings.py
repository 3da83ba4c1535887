# src/config/settings.py

"""Central configuration for the storefront catalog service."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the storefront catalog service."""

    # --- Fetching ---
    SOURCE_ATTEMPT_TIMEOUT: float = 15.0  # Seconds per candidate source
    SOURCE_TOTAL_BUDGET: float = 45.0     # Seconds across the whole chain
    STREAM_CHUNK_SIZE: int = 64 * 1024    # Bytes per streamed read
    HTML_PEEK_LIMIT: int = 64 * 1024      # Bytes read from an HTML error page
    MAX_RECORDS: int = 1000               # Record cap per fetch

    # --- Cache ---
    CATALOG_CACHE_TTL: float = 300.0      # Catalog snapshot lifetime (secs)

    # --- Normalization defaults (half-open ranges) ---
    PRICE_DEFAULT_RANGE: tuple[int, int] = (20, 120)
    POPULARITY_DEFAULT_RANGE: tuple[int, int] = (100, 1100)
    FEEDBACK_DEFAULT_RANGE: tuple[int, int] = (50, 250)

    # --- Listing ---
    DEFAULT_PAGE_SIZE: int = 20
    MAX_CHAT_RECOMMENDATIONS: int = 6

    # --- Transport ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    CSV_HEADERS: dict[str, str] = {
        "User-Agent": "Mozilla/5.0 (compatible; ProductGrid/1.0)",
        "Accept": "text/csv, text/plain, */*",
        "Cache-Control": "no-cache",
    }
    JSON_HEADERS: dict[str, str] = {
        "User-Agent": "Mozilla/5.0 (compatible; ProductGrid/1.0)",
        "Accept": "application/json, text/plain, */*",
        "Cache-Control": "no-cache",
    }

    # --- API ---
    API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Sources (tried strictly in this order) ---
    CATALOG_SOURCES: list[dict[str, str]] = [
        {
            "id": "primary_csv",
            "label": "Azure Blob Storage CSV",
            "format": "csv",
            "url": os.getenv(
                "CATALOG_CSV_URL",
                "https://rohitproductstore.blob.core.windows.net/"
                "products/Final_dataset.csv",
            ),
        },
        {
            "id": "azure_json",
            "label": "Azure Blob Storage JSON",
            "format": "json",
            "url": os.getenv(
                "CATALOG_JSON_URL",
                "https://rohitproductstore.blob.core.windows.net/"
                "products/products_with_urls.json",
            ),
        },
        {
            "id": "jsdelivr",
            "label": "jsDelivr CDN",
            "format": "json",
            "url": os.getenv(
                "CATALOG_CDN_URL",
                "https://cdn.jsdelivr.net/gh/2023aa05550-bit/"
                "product-dataset@main/products_with_urls.json",
            ),
        },
        {
            "id": "github_raw",
            "label": "GitHub Raw CDN",
            "format": "json",
            "url": os.getenv(
                "CATALOG_RAW_URL",
                "https://raw.githubusercontent.com/2023aa05550-bit/"
                "product-dataset/main/products_with_urls.json",
            ),
        },
    ]

    SAMPLE_DATA_LABEL: str = "Sample Data Fallback"
