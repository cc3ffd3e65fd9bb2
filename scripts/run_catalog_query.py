#!/usr/bin/env python3
"""
Query the catalogue layer from the command line.

Usage:
    python scripts/run_catalog_query.py --category black-tea --sort price-asc
    python scripts/run_catalog_query.py --category green-tea --availability on-sale --rating 4.5+
    python scripts/run_catalog_query.py --related black-tea p-001
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from storefront.catalog import CatalogService, FilterCriteria, QueryKey, SortSpec, TTLCache
from storefront.integrations import FetchError, build_catalog_source
from storefront.utils.config_loader import load_catalog_config

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


async def run(args: argparse.Namespace) -> int:
    cfg = load_catalog_config(Path(args.config) if args.config else None)
    service = CatalogService(
        source=build_catalog_source(cfg),
        cache=TTLCache(ttl_seconds=cfg.cache.ttl_seconds, max_entries=cfg.cache.max_entries),
        related_limit=cfg.related.max_items,
        related_fetch_limit=cfg.related.fetch_limit,
    )

    criteria = FilterCriteria.from_params(
        {
            "search": args.search,
            "priceRange": args.price_range,
            "availability": args.availability,
            "rating": args.rating,
            "weight": args.weight,
        }
    )
    sort = SortSpec.parse(args.sort)

    try:
        if args.related:
            category_id, item_id = args.related
            items = await service.get_related(category_id, item_id, criteria, sort)
        else:
            key = QueryKey.from_params(category=args.category, search=args.search, limit=args.limit)
            items = await service.get_collection(key, criteria, sort)
    except FetchError as e:
        logger.error("Fetch failed (%s): %s", e.kind.value, e.message)
        return 1

    print(f"{len(items)} item(s)")
    for item in items:
        print(f"  {item.id:<8} {item.name:<28} {item.price:>8.2f}  rating={item.rating:.1f}  stock={item.stock}")
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Query the storefront catalogue")
    parser.add_argument("--config", help="Path to catalog_config.yml")
    parser.add_argument("--category")
    parser.add_argument("--search")
    parser.add_argument("--limit", type=int)
    parser.add_argument("--price-range", dest="price_range", help="e.g. 100-200, 500+")
    parser.add_argument("--availability", help="in-stock, on-sale, bestseller")
    parser.add_argument("--rating", help="4+, 4.5+, 5")
    parser.add_argument("--weight", help="e.g. 100")
    parser.add_argument("--sort", help="name-asc, price-desc, rating-desc, newest, popular")
    parser.add_argument("--related", nargs=2, metavar=("CATEGORY_ID", "ITEM_ID"))
    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
