import pytest
import requests

from conftest import unique_sku
from store import ActionResult, ProductStore


class OfflineHttp:
    def __getattr__(self, method):
        def call(url, **kwargs):
            raise requests.ConnectionError(f"{method.upper()} {url} unreachable")
        return call


def draft(catalog, sku, quantity=12, price=9.5):
    return {
        "id": "1700000000000",
        "name": "Aceite para barba",
        "sku": sku,
        "price": price,
        "purchasePrice": 4.0,
        "quantity": quantity,
        "status": "Stock Bajo",
        "categoryId": catalog["category"]["id"],
        "supplierId": catalog["supplier"]["id"],
    }


@pytest.fixture
def store(client, token):
    return ProductStore(http=client, base_url="", token=token)


def test_load_reference_lists(store, catalog):
    assert store.load_categories().success
    assert store.load_suppliers().success
    assert catalog["category"]["id"] in [c["id"] for c in store.categories]
    assert catalog["supplier"]["id"] in [s["id"] for s in store.suppliers]
    assert store.is_loading is False


def test_add_product_replaces_temporary_id(store, catalog):
    result = store.add_product(draft(catalog, unique_sku("OIL")))
    assert result.success
    assert result.product["id"] != "1700000000000"
    assert isinstance(result.product["id"], int)
    assert store.all_products == [result.product]
    assert result.product["category"] == catalog["category"]["name"]


def test_add_duplicate_reports_server_error(store, catalog):
    sku = unique_sku("OIL")
    store.add_product(draft(catalog, sku))
    result = store.add_product(draft(catalog, sku))
    assert result == ActionResult(success=False, error="SKU debe ser único")
    assert len(store.all_products) == 1


def test_update_and_quantity_replace_local_record(store, catalog):
    created = store.add_product(draft(catalog, unique_sku())).product

    changed = dict(created, name="Aceite premium", quantity=30)
    result = store.update_product(changed)
    assert result.success
    assert store.all_products[0]["name"] == "Aceite premium"
    assert store.all_products[0]["status"] == "Disponible"

    result = store.update_product_quantity(created["id"], 0)
    assert result.success
    assert store.find_product(created["id"])["quantity"] == 0
    assert store.find_product(created["id"])["status"] == "Sin Stock"


def test_delete_product_removes_local_record(store, catalog):
    keep = store.add_product(draft(catalog, unique_sku())).product
    gone = store.add_product(draft(catalog, unique_sku())).product

    assert store.delete_product(gone["id"]).success
    assert [p["id"] for p in store.all_products] == [keep["id"]]

    store.all_products = []
    assert store.load_products().success
    assert [p["id"] for p in store.all_products] == [keep["id"]]


def test_failed_calls_leave_state_untouched(store, catalog):
    created = store.add_product(draft(catalog, unique_sku())).product
    before = list(store.all_products)

    result = store.delete_product(987654)
    assert not result.success
    assert result.error == "Fallo al eliminar el producto"
    assert store.all_products == before


def test_missing_session_is_reported(client):
    anonymous = ProductStore(http=client, base_url="")
    result = anonymous.load_products()
    assert not result.success
    assert anonymous.all_products == []


def test_network_errors_do_not_raise():
    store = ProductStore(http=OfflineHttp(), base_url="http://inventory.invalid", token="t")
    assert not store.load_products().success
    assert not store.add_product({"name": "x", "sku": "x"}).success
    assert not store.update_product({"id": 1}).success
    assert not store.update_product_quantity(1, 3).success
    result = store.delete_product(1)
    assert not result.success
    assert "unreachable" in result.error
    assert store.is_loading is False


def test_ui_state_setters(store):
    store.set_open_product_dialog(True)
    store.set_open_dialog(True)
    store.set_selected_product({"id": 3})
    assert store.open_product_dialog and store.open_dialog
    assert store.selected_product == {"id": 3}
