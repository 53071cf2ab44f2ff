"""
Menu Population Script

Seeds a running catalog API with the sample menu.
Run from project root: python scripts/populate_menu.py --owner-key <key>

Categories that already exist and items whose name is already present
in their category are skipped, so the script can be re-run safely.
"""

import asyncio
import sys
import os
import time
import argparse
from collections import Counter

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
# Windows event loop fix
if sys.platform == "win32":
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from taqueria.menu.errors import CatalogError, ConflictError
from taqueria.menu.manager import PLACEHOLDER_ITEM
from taqueria.schemas import CategoryCreate, MenuItemCreate
from taqueria.services.catalog import HttpCatalogService
from taqueria.services.catalog.sample_menu import SAMPLE_CATEGORIES, SAMPLE_MENU_ITEMS

# Configuration
API_BASE_URL = "http://localhost:8001"


def print_counts(title: str, items) -> None:
    counts = Counter(item.category for item in items)
    print(f"\n{title}")
    for category, total in sorted(counts.items()):
        print(f"  - {category}: {total} items")


async def populate_menu(base_url: str, owner_key: str = None) -> int:
    """
    Create the sample categories and items.

    Returns:
        int: Number of menu items added
    """
    print("=" * 70)
    print("Starting menu population...")
    print(f"Target: {base_url}")
    print("=" * 70)

    catalog = HttpCatalogService(base_url=base_url, owner_key=owner_key, timeout=30.0)
    start_time = time.time()
    added = 0

    try:
        existing = await catalog.list_menu_items()
        print(f"Found {len(existing)} existing menu items")
        print_counts("Current items per category:", existing)

        created_categories = []
        for data in SAMPLE_CATEGORIES:
            try:
                category = await catalog.create_category(CategoryCreate.model_validate(data))
            except ConflictError:
                print(f"Skipped category: {data['name']} (already exists)")
                continue
            created_categories.append(category.name)
            print(f"Added category: {category.translation} (order {category.order})")

        present = {(item.category, item.name) for item in existing}
        for data in SAMPLE_MENU_ITEMS:
            if (data["category"], data["name"]) in present:
                print(f"Skipped: {data['name']} (already exists)")
                continue
            try:
                item = await catalog.create_menu_item(MenuItemCreate.model_validate(data))
            except CatalogError as e:
                print(f"Error adding {data['name']}: {e.message}")
                continue
            print(f"Added: {item.name} ({item.category})")
            added += 1

        # New categories came with a placeholder item; drop it now that
        # they hold real items
        for item in await catalog.list_menu_items():
            if item.category in created_categories and item.name == PLACEHOLDER_ITEM["name"]:
                await catalog.delete_menu_item(item.id)

        final = await catalog.list_menu_items()
        elapsed = round(time.time() - start_time, 2)

        print("\n" + "=" * 70)
        print("Menu population complete!")
        print(f"Added {added} new items in {elapsed}s")
        print(f"Total items: {len(final)}")
        print_counts("Final items per category:", final)
        print("=" * 70)
    finally:
        await catalog.aclose()

    return added


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Menu Population Script")
    parser.add_argument("--url", default=API_BASE_URL, help="Catalog API base URL")
    parser.add_argument("--owner-key", default=os.getenv("OWNER_API_KEY"), help="Owner API key")
    args = parser.parse_args()

    try:
        asyncio.run(populate_menu(args.url, args.owner_key))
    except CatalogError as e:
        print(f"\nScript failed: {e.message}")
        sys.exit(1)
