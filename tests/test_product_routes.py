from datetime import timedelta

from sqlalchemy.exc import SQLAlchemyError

from services.product_service.repository import ProductRepository
from services.product_service.schemas import INT32_MAX
from shared.security import COOKIE_NAME, Role, create_access_token


def failing_write(calls: list):
    async def _fail(*args, **kwargs):
        calls.append(args)
        raise SQLAlchemyError("backend unavailable")

    return _fail


async def test_anonymous_callers_are_rejected(client):
    response = await client.get("/Product/Index")
    assert response.status_code == 401


async def test_expired_token_is_rejected(client, settings):
    token = create_access_token(
        {"sub": "1", "name": "old", "role": "Admin"}, settings, expires_delta=timedelta(minutes=-1)
    )
    client.cookies.set(COOKIE_NAME, token)

    response = await client.get("/Product/Index")

    assert response.status_code == 401


async def test_unknown_role_claim_is_rejected(client, settings):
    client.cookies.set(
        COOKIE_NAME, create_access_token({"sub": "1", "name": "x", "role": "Owner"}, settings)
    )
    assert (await client.get("/Product/Index")).status_code == 401


async def test_index_pages_five_at_a_time(client, login_as, seed_products):
    await seed_products(*[f"Item {i:02d}" for i in range(1, 8)])
    login_as(Role.EMPLOYEE)

    page_one = await client.get("/Product/Index")
    page_two = await client.get("/Product/Index", params={"pageNumber": 2})

    assert page_one.status_code == 200
    assert "Item 05" in page_one.text and "Item 06" not in page_one.text
    assert "Item 06" in page_two.text and "Item 07" in page_two.text
    assert "Item 01" not in page_two.text


async def test_index_sorts_by_requested_field_and_direction(client, login_as, seed_products):
    await seed_products("Alpha", "Zeta", "Mid")
    login_as(Role.EMPLOYEE)

    response = await client.get("/Product/Index", params={"sortField": "Name", "ascending": "false"})

    text = response.text
    assert text.index("Zeta") < text.index("Mid") < text.index("Alpha")


async def test_index_rejects_unknown_sort_field(client, login_as):
    login_as(Role.EMPLOYEE)
    response = await client.get("/Product/Index", params={"sortField": "Id; DROP TABLE products"})
    assert response.status_code == 400


async def test_index_rejects_page_zero(client, login_as):
    login_as(Role.EMPLOYEE)
    response = await client.get("/Product/Index", params={"pageNumber": 0})
    assert response.status_code == 422


async def test_details_found_and_missing(client, login_as, seed_products):
    [product_id] = await seed_products("Tape Gun", description="Heavy duty")
    login_as(Role.EMPLOYEE)

    found = await client.get(f"/Product/Details/{product_id}")
    missing = await client.get("/Product/Details/999")

    assert found.status_code == 200
    assert "Heavy duty" in found.text
    assert missing.status_code == 404


async def test_create_is_admin_only(client, login_as):
    login_as(Role.EMPLOYEE)

    assert (await client.get("/Product/Create")).status_code == 403
    response = await client.post(
        "/Product/Create", data={"name": "Pen", "quantity": "1", "description": "x"}
    )
    assert response.status_code == 403
    assert (await client.get("/Product/Autocomplete", params={"term": "Pen"})).json() == []


async def test_admin_creates_product_and_is_redirected(client, login_as):
    login_as(Role.ADMIN)

    form = await client.get("/Product/Create")
    response = await client.post(
        "/Product/Create", data={"name": "Pen", "quantity": "20", "description": "Blue ink"}
    )

    assert form.status_code == 200
    assert response.status_code == 303
    assert response.headers["location"] == "/Product/Index"
    assert (await client.get("/Product/Autocomplete", params={"term": "pen"})).json() == ["Pen"]


async def test_invalid_create_redisplays_form_without_mutation(client, login_as):
    login_as(Role.ADMIN)

    response = await client.post(
        "/Product/Create", data={"name": "", "quantity": "lots", "description": "Blue ink"}
    )

    assert response.status_code == 422
    assert 'name="name"' in response.text
    assert "valid integer" in response.text
    assert (await client.get("/Product/Autocomplete", params={"term": ""})).json() == []


async def test_edit_updates_product(client, login_as, seed_products):
    [product_id] = await seed_products("Pen", quantity=20, description="Blue ink")
    login_as(Role.EMPLOYEE)

    form = await client.get(f"/Product/Edit/{product_id}")
    response = await client.post(
        f"/Product/Edit/{product_id}",
        data={"id": str(product_id), "name": "Pen Updated", "quantity": "30", "description": "Black ink"},
    )
    details = await client.get(f"/Product/Details/{product_id}")

    assert form.status_code == 200
    assert response.status_code == 303
    assert "Pen Updated" in details.text and "Black ink" in details.text


async def test_edit_with_mismatched_ids_is_not_found(client, login_as, seed_products):
    [product_id] = await seed_products("Pen")
    login_as(Role.EMPLOYEE)

    response = await client.post(
        f"/Product/Edit/{product_id}",
        data={"id": str(product_id + 1), "name": "Hijack", "quantity": "1", "description": "x"},
    )

    assert response.status_code == 404
    assert (await client.get("/Product/Autocomplete", params={"term": "Hijack"})).json() == []


async def test_edit_missing_product_is_not_found(client, login_as):
    login_as(Role.EMPLOYEE)
    assert (await client.get("/Product/Edit/123")).status_code == 404


async def test_delete_flow_is_admin_only(client, login_as, seed_products):
    [product_id] = await seed_products("Stapler")

    login_as(Role.EMPLOYEE)
    assert (await client.get(f"/Product/Delete/{product_id}")).status_code == 403
    assert (await client.post(f"/Product/DeleteConfirmed/{product_id}")).status_code == 403

    login_as(Role.ADMIN)
    confirm = await client.get(f"/Product/Delete/{product_id}")
    response = await client.post(f"/Product/DeleteConfirmed/{product_id}")

    assert confirm.status_code == 200
    assert response.status_code == 303
    assert response.headers["location"] == "/Product/Index"
    assert (await client.get(f"/Product/Details/{product_id}")).status_code == 404


async def test_blank_search_redirects_to_index(client, login_as):
    login_as(Role.EMPLOYEE)

    for params in ({}, {"namePart": "   "}):
        response = await client.get("/Product/Search", params=params)
        assert response.status_code == 302
        assert response.headers["location"] == "/Product/Index"


async def test_search_lists_matches(client, login_as, seed_products):
    await seed_products("Pen", "Pencil", "Stapler")
    login_as(Role.EMPLOYEE)

    response = await client.get("/Product/Search", params={"namePart": "pen"})

    assert response.status_code == 200
    assert "Pencil" in response.text
    assert "Stapler" not in response.text


async def test_autocomplete_returns_names_only(client, login_as, seed_products):
    await seed_products("Pencil", "Pen", "Stapler")
    login_as(Role.EMPLOYEE)

    response = await client.get("/Product/Autocomplete", params={"term": "PEN"})

    assert response.status_code == 200
    assert response.json() == ["Pen", "Pencil"]


async def test_index_rejects_page_number_beyond_int32(client, login_as, app):
    login_as(Role.EMPLOYEE)

    too_big = await client.get("/Product/Index", params={"pageNumber": 10**19})
    largest = await client.get("/Product/Index", params={"pageNumber": INT32_MAX})

    assert too_big.status_code == 422
    assert largest.status_code == 200
    assert "No products on this page." in largest.text
    assert len(app.state.product_service.cache) == 1


async def test_create_rejects_quantity_outside_int32(client, login_as):
    login_as(Role.ADMIN)

    response = await client.post(
        "/Product/Create", data={"name": "Pallet", "quantity": str(10**20), "description": "Wood"}
    )

    assert response.status_code == 422
    assert "less than or equal to 2147483647" in response.text
    assert (await client.get("/Product/Autocomplete", params={"term": "Pallet"})).json() == []


async def test_edit_rejects_quantity_outside_int32(client, login_as, seed_products):
    [product_id] = await seed_products("Pallet", quantity=3)
    login_as(Role.EMPLOYEE)

    response = await client.post(
        f"/Product/Edit/{product_id}",
        data={"id": str(product_id), "name": "Pallet", "quantity": str(-(2**31) - 1), "description": "Wood"},
    )
    details = await client.get(f"/Product/Details/{product_id}")

    assert response.status_code == 422
    assert "greater than or equal to -2147483648" in response.text
    assert "<dd>3</dd>" in details.text


async def test_create_backend_failure_shows_generic_error(client, login_as, monkeypatch):
    calls = []
    monkeypatch.setattr(ProductRepository, "create_product", failing_write(calls))
    login_as(Role.ADMIN)

    response = await client.post(
        "/Product/Create", data={"name": "Pen", "quantity": "1", "description": "Blue ink"}
    )

    assert response.status_code == 500
    assert "An error occurred while creating the product." in response.text
    assert 'value="Pen"' in response.text
    assert len(calls) == 1


async def test_update_backend_failure_shows_generic_error(client, login_as, seed_products, monkeypatch):
    [product_id] = await seed_products("Pen", quantity=20, description="Blue ink")
    calls = []
    monkeypatch.setattr(ProductRepository, "update_product", failing_write(calls))
    login_as(Role.EMPLOYEE)

    response = await client.post(
        f"/Product/Edit/{product_id}",
        data={"id": str(product_id), "name": "Pen Updated", "quantity": "30", "description": "Black ink"},
    )
    details = await client.get(f"/Product/Details/{product_id}")

    assert response.status_code == 500
    assert "An error occurred while updating the product." in response.text
    assert len(calls) == 1
    assert "Blue ink" in details.text


async def test_delete_backend_failure_redirects_back_with_error(client, login_as, seed_products, monkeypatch):
    [product_id] = await seed_products("Stapler")
    calls = []
    monkeypatch.setattr(ProductRepository, "delete_product", failing_write(calls))
    login_as(Role.ADMIN)

    response = await client.post(f"/Product/DeleteConfirmed/{product_id}")

    assert response.status_code == 303
    assert response.headers["location"] == f"/Product/Delete/{product_id}?error=true"
    assert len(calls) == 1

    page = await client.get(response.headers["location"])
    assert page.status_code == 200
    assert "An error occurred while deleting the product." in page.text
    assert (await client.get(f"/Product/Details/{product_id}")).status_code == 200
