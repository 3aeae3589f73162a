#!/usr/bin/env python
"""Script to create the default painting categories in the document store."""
from __future__ import annotations

import argparse

from artgallery.models import Category
from artgallery.services.firebase_db import get_db

DEFAULT_CATEGORIES = ["Abstract", "Landscape", "Portrait", "Modern", "Nature", "Still Life"]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed gallery categories")
    parser.add_argument("names", nargs="*", default=DEFAULT_CATEGORIES)
    parser.add_argument("--inactive", action="store_true", help="Create the categories hidden")
    args = parser.parse_args()

    store = get_db()
    for name in args.names:
        if store.find_one(Category, "name", name) is not None:
            print(f"Skipping existing category: {name}")
            continue
        category = store.create(Category, {"name": name, "is_active": not args.inactive})
        print("Created category:")
        print(category.model_dump_json(indent=2))


if __name__ == "__main__":
    main()
