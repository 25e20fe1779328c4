import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pymongo.collection import Collection

from database import sanitize, strip_ids, to_obj_id
from errors import Internal, InvalidArgument, NotFound, Unauthenticated
from identity import IdentityVerifier, bearer_token

logger = logging.getLogger(__name__)

SELLER_FIELD = "sellerID"
REQUIRED_FIELDS = ("customerId", "products", "totalAmount")


class OrderService:
    def __init__(self, collection: Collection, verifier: Optional[IdentityVerifier] = None):
        self.collection = collection
        self.verifier = verifier

    def list_for_seller(self, authorization: Optional[str]) -> List[Dict]:
        """Orders belonging to the seller identified by the bearer token."""
        token = bearer_token(authorization)
        if not token:
            raise Unauthenticated("Unauthorized: No token provided")
        if self.verifier is None:
            raise Internal("Identity verifier not configured")
        seller_id = self.verifier.verify(token)
        return [sanitize(o) for o in self.collection.find({SELLER_FIELD: seller_id})]

    def create_many(self, orders: Any) -> Dict[str, Any]:
        """
        Insert a batch of orders in one round trip.

        Caller-supplied identifiers are dropped and every order is stamped
        with the server time. Returns ``insertedCount`` and the stored orders.
        """
        if not isinstance(orders, list):
            raise InvalidArgument("Request body must be an array of orders")
        now = datetime.now(timezone.utc)
        docs = []
        for i, order in enumerate(orders):
            if not isinstance(order, dict):
                raise InvalidArgument(f"Order at index {i} must be an object")
            missing = [f for f in REQUIRED_FIELDS if order.get(f) is None]
            if missing:
                raise InvalidArgument(f"Order at index {i} is missing required fields: {', '.join(missing)}")
            docs.append({**strip_ids(order), "orderDate": now})
        if not docs:
            return {"insertedCount": 0, "orders": []}
        res = self.collection.insert_many(docs)
        for doc, inserted_id in zip(docs, res.inserted_ids):
            doc["_id"] = inserted_id
        logger.info("Inserted %d orders", len(res.inserted_ids))
        return {"insertedCount": len(res.inserted_ids), "orders": [sanitize(d) for d in docs]}

    def delete_one(self, order_id: str) -> None:
        if not order_id:
            raise InvalidArgument("Missing order ID")
        oid = to_obj_id(order_id)
        if oid is None:
            raise NotFound("Order not found")
        res = self.collection.delete_one({"_id": oid})
        if res.deleted_count == 0:
            raise NotFound("Order not found")
        logger.info("Deleted order %s", order_id)
