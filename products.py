import logging
import math
import random
import re
from typing import Any, Dict, List

from pymongo.collection import Collection

from database import sanitize, strip_ids, to_obj_id
from errors import InvalidArgument, NotFound

logger = logging.getLogger(__name__)

SELLER_FIELD = "sellerUid"
DEFAULT_PAGE_SIZE = 10


class ProductService:
    def __init__(self, collection: Collection):
        self.collection = collection

    def list_all(self) -> List[Dict]:
        products = [sanitize(p) for p in self.collection.find({})]
        random.shuffle(products)
        return products

    def search(self, query: str) -> List[Dict]:
        """Products whose name contains ``query``, ignoring case."""
        if not query:
            raise InvalidArgument("Search query is required")
        cursor = self.collection.find({"name": {"$regex": re.escape(query), "$options": "i"}})
        return [sanitize(p) for p in cursor]

    def list_page(self, page: int, page_size: int = DEFAULT_PAGE_SIZE) -> Dict[str, Any]:
        """
        One page of a freshly drawn random ordering of all products.

        The ordering is re-sampled on every call, so successive pages may
        repeat or skip products.
        """
        if page < 1 or page_size < 1:
            raise InvalidArgument("page and pageSize must be positive")
        total = self.collection.count_documents({})
        total_pages = math.ceil(total / page_size)
        if page > total_pages:
            raise NotFound("Page not found")
        pipeline = [
            {"$sample": {"size": total}},
            {"$skip": (page - 1) * page_size},
            {"$limit": page_size},
        ]
        products = [sanitize(p) for p in self.collection.aggregate(pipeline)]
        return {
            "products": products,
            "currentPage": page,
            "totalPages": total_pages,
            "pageSize": page_size,
            "totalProducts": total,
        }

    def list_by_seller(self, seller_id: str) -> List[Dict]:
        return [sanitize(p) for p in self.collection.find({SELLER_FIELD: seller_id})]

    def create(self, product: Dict[str, Any]) -> str:
        res = self.collection.insert_one(strip_ids(product))
        logger.info("Inserted product %s", res.inserted_id)
        return str(res.inserted_id)

    def update(self, product_id: str, fields: Dict[str, Any]) -> int:
        """Merge ``fields`` into the product; returns how many documents changed."""
        oid = to_obj_id(product_id)
        if oid is None:
            raise NotFound("Product not found")
        changes = strip_ids(fields)
        if not changes:
            # nothing to $set, a missing product is still a 404
            if self.collection.find_one({"_id": oid}, {"_id": 1}) is None:
                raise NotFound("Product not found")
            return 0
        res = self.collection.update_one({"_id": oid}, {"$set": changes})
        if res.matched_count == 0:
            raise NotFound("Product not found")
        logger.info("Updated product %s (%d modified)", product_id, res.modified_count)
        return res.modified_count

    def delete(self, product_id: str) -> int:
        oid = to_obj_id(product_id)
        if oid is None:
            raise NotFound("Product not found")
        res = self.collection.delete_one({"_id": oid})
        if res.deleted_count == 0:
            raise NotFound("Product not found")
        logger.info("Deleted product %s", product_id)
        return res.deleted_count
