from cookite.catalog import ReservationItem, build_items, compute_totals


def test_totals_apply_twenty_percent_discount():
    items = [
        ReservationItem("cookie", "Cookie", 2, 7.0),
        ReservationItem("cake-pop", "Cake Pop", 1, 4.5),
    ]

    totals = compute_totals(items)

    assert totals.total_items == 3
    assert totals.subtotal == 18.5
    assert totals.discount == 3.7
    assert totals.total == 14.8


def test_discount_rounds_to_cents():
    totals = compute_totals([ReservationItem("cake-pop", "Cake Pop", 3, 4.5)])

    assert totals.subtotal == 13.5
    assert totals.discount == 2.7
    assert totals.total == 10.8

    odd = compute_totals([ReservationItem("x", "X", 1, 0.05)])
    assert odd.discount == 0.01
    assert odd.total == 0.04


def test_build_items_drops_zero_and_unknown_products():
    items = build_items({"cookie": 2, "cake-pop": 0, "brigadeiro": 4, "palha-italiana": 1})

    assert [(item.product_id, item.quantity) for item in items] == [("palha-italiana", 1), ("cookie", 2)]
    assert items[1].as_payload() == {
        "productId": "cookie",
        "productName": "Cookie",
        "quantity": 2,
        "unitPrice": 7.0,
    }


def test_empty_order_totals_to_zero():
    totals = compute_totals([])

    assert totals.as_dict() == {"total_items": 0, "subtotal": 0.0, "discount": 0.0, "total": 0.0}
