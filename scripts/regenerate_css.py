#!/usr/bin/env python
"""Script to regenerate feature image CSS files for one or all pages."""
from __future__ import annotations

import argparse
import logging
import sys

from featureimages.services.feature_images import get_feature_images
from featureimages.services.pages import get_page_store
from featureimages.services.storage import AssetStorageError


def main() -> int:
    parser = argparse.ArgumentParser(description="Regenerate feature image CSS")
    parser.add_argument("--page-id", type=int, default=None, help="Only regenerate this page")
    parser.add_argument("--dry-run", action="store_true", help="Print the CSS instead of writing it")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    store = get_page_store()
    feature_images = get_feature_images()

    pages = [store.require(args.page_id)] if args.page_id is not None else store.list()
    failures = 0
    for page in pages:
        if not feature_images.has_feature_images(page):
            print(f"Page {page.id}: no feature images, skipped")
            continue
        if args.dry_run:
            print(f"/* page {page.id} */")
            print(feature_images.get_css(page))
            continue
        try:
            path = feature_images.regenerate_css(page)
        except AssetStorageError as exc:
            failures += 1
            print(f"Page {page.id}: failed: {exc}", file=sys.stderr)
            continue
        print(f"Page {page.id}: wrote {path}")
    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
