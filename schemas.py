"""
Database Schemas for the Marketplace API

Documents in the three MongoDB collections are schema-flexible; the models
below describe the request bodies and the shapes the API hands back.

- products: name plus free-form attributes, seller in ``sellerUid``
- orders: customerId, products, totalAmount, seller in ``sellerID``, orderDate
- reviews: free-form review payload
"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List


class ReviewCreate(BaseModel):
    review: Dict[str, Any] = Field(..., description="Rating, text, author, ...")


class PaymentIntentRequest(BaseModel):
    amount: int = Field(..., description="Amount in the smallest currency unit")


class PaymentIntentResponse(BaseModel):
    clientSecret: str


class ProductPage(BaseModel):
    products: List[Dict[str, Any]]
    currentPage: int
    totalPages: int
    pageSize: int
    totalProducts: int
