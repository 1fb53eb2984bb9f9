# run_catalog.py
import argparse
import logging

from catalogsync import CatalogFactory, NotFoundError

# ========== CONFIGURATION ==========

DEFAULT_CONFIG = "configs/in_memory.yaml"

parser = argparse.ArgumentParser(description="Catalog cache-aside engine demo")
parser.add_argument(
    "--config", "-c",
    type=str,
    default=DEFAULT_CONFIG,
    help=f"Path to catalog config YAML (default: {DEFAULT_CONFIG})"
)
parser.add_argument(
    "--products", "-p",
    type=str,
    default=None,
    help="Optional JSONL file of products to load first"
)
parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
args = parser.parse_args()

logging.basicConfig(
    level=logging.DEBUG if args.verbose else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

# ========== INITIALIZATION ==========

print(f"Loading config from: {args.config}")
engine = CatalogFactory.create_from_yaml(args.config)
print(f"Store health: {engine.health()}")

if args.products:
    print(f"Loading products from: {args.products}")
    print(engine.load_products(args.products))

# ========== SCENARIO ==========

print("\n" + "=" * 60)
print("CREATE")
print("=" * 60)
result = engine.create({"name": "Pen", "description": "Blue ballpoint pen", "category": "office", "price": 1.5, "stock": 100})
pen = result.product
print(f"Created: {pen.model_dump()}")
print(f"Index status: {result.index_status}")

print("\n" + "=" * 60)
print("READ")
print("=" * 60)
for _ in range(2):
    engine.get_by_id(pen.id)
print(f"Popularity of {pen.id}: {engine.tracker.score(pen.id)}")
print(f"Popular: {[p.name for p in engine.get_popular()]}")

print("\n" + "=" * 60)
print("UPDATE")
print("=" * 60)
updated = engine.update({"id": pen.id, "stock": 50}).product
print(f"stock={updated.stock} price={updated.price}")

print("\n" + "=" * 60)
print("SEARCH")
print("=" * 60)
print(f"'pen': {[d.name for d in engine.search('pen')]}")

print("\n" + "=" * 60)
print("DELETE")
print("=" * 60)
engine.delete(pen.id)
try:
    engine.get_by_id(pen.id)
except NotFoundError as e:
    print(f"After delete: {e}")

engine.close()
