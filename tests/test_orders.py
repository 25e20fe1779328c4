import pytest
from bson import ObjectId

from errors import Internal, InvalidArgument, NotFound, Unauthenticated
from orders import OrderService


@pytest.fixture
def service(store, verifier):
    return OrderService(store.orders, verifier)


def order(**extra):
    return {"customerId": "cust-1", "products": [{"productId": "p1", "qty": 1}], "totalAmount": 25, **extra}


def test_list_for_seller_needs_token(service):
    with pytest.raises(Unauthenticated):
        service.list_for_seller(None)
    with pytest.raises(Unauthenticated):
        service.list_for_seller("Basic abc")


def test_list_for_seller_rejects_invalid_token(service):
    with pytest.raises(Unauthenticated):
        service.list_for_seller("Bearer forged")


def test_list_for_seller_without_verifier(store):
    with pytest.raises(Internal):
        OrderService(store.orders).list_for_seller("Bearer valid:seller-42")


def test_list_for_seller_filters_by_principal(service, store):
    store.orders.insert_many([order(sellerID="seller-42"), order(sellerID="seller-42"), order(sellerID="other")])
    orders = service.list_for_seller("Bearer valid:seller-42")
    assert len(orders) == 2
    assert all(o["sellerID"] == "seller-42" for o in orders)


def test_create_many_requires_list(service):
    with pytest.raises(InvalidArgument):
        service.create_many(order())


def test_create_many_rejects_bad_elements(service, store):
    with pytest.raises(InvalidArgument):
        service.create_many([order(), "nope"])
    with pytest.raises(InvalidArgument):
        service.create_many([{"customerId": "c", "products": []}])
    assert store.orders.count_documents({}) == 0


def test_create_many_strips_ids(service, store):
    result = service.create_many([order(_id="a"), order(_id="b", id="b")])
    assert result["insertedCount"] == 2
    ids = [o["id"] for o in result["orders"]]
    assert "a" not in ids and "b" not in ids
    assert store.orders.count_documents({}) == 2
    assert all(o["orderDate"] is not None for o in result["orders"])


def test_create_many_empty_list(service):
    assert service.create_many([]) == {"insertedCount": 0, "orders": []}


def test_delete_one(service, store):
    oid = store.orders.insert_one(order()).inserted_id
    with pytest.raises(InvalidArgument):
        service.delete_one("")
    service.delete_one(str(oid))
    with pytest.raises(NotFound):
        service.delete_one(str(oid))
    with pytest.raises(NotFound):
        service.delete_one(str(ObjectId()))


def test_orders_routes(client, store):
    res = client.post("/orders/add", json=[order(sellerID="seller-42"), order(sellerID="seller-7")])
    assert res.status_code == 201
    body = res.json()
    assert body["insertedCount"] == 2

    res = client.get("/orders")
    assert res.status_code == 401
    assert res.json() == {"error": "Unauthorized: No token provided"}

    res = client.get("/orders", headers={"Authorization": "Bearer valid:seller-42"})
    assert res.status_code == 200
    orders = res.json()["orders"]
    assert [o["sellerID"] for o in orders] == ["seller-42"]

    res = client.delete(f"/orders/{orders[0]['id']}")
    assert res.status_code == 200
    assert client.delete(f"/orders/{orders[0]['id']}").status_code == 404


def test_add_orders_route_rejects_object(client):
    res = client.post("/orders/add", json=order())
    assert res.status_code == 400
    assert res.json() == {"error": "Request body must be an array of orders"}


def test_create_many_accepts_opaque_values(service, store):
    result = service.create_many([
        order(customerId={"uid": "u1"}),
        order(products={"p1": 2}, totalAmount="25.00"),
    ])
    assert result["insertedCount"] == 2
    assert store.orders.find_one({"customerId": {"uid": "u1"}}) is not None


def test_create_many_rejects_null_fields(service):
    with pytest.raises(InvalidArgument) as exc:
        service.create_many([order(totalAmount=None)])
    assert "totalAmount" in exc.value.message
