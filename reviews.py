import logging
import random
from typing import Any, Dict, List

from pymongo.collection import Collection

from database import sanitize
from errors import Internal, NotFound

logger = logging.getLogger(__name__)

MIN_SAMPLE = 10
MAX_SAMPLE = 20


class ReviewService:
    def __init__(self, collection: Collection):
        self.collection = collection

    def sample_reviews(self) -> List[Dict]:
        """Between MIN_SAMPLE and MAX_SAMPLE random reviews, fewer if fewer are stored."""
        size = random.randint(MIN_SAMPLE, MAX_SAMPLE)
        reviews = [sanitize(r) for r in self.collection.aggregate([{"$sample": {"size": size}}])]
        if not reviews:
            raise NotFound("No reviews found")
        return reviews

    def add_review(self, review: Dict[str, Any]) -> str:
        res = self.collection.insert_one(review)
        if not res.acknowledged or res.inserted_id is None:
            raise Internal("Failed to add review")
        logger.info("Inserted review %s", res.inserted_id)
        return str(res.inserted_id)
