from unittest import mock

import pytest

from conftest import unique_sku
from dialog import SKU_IN_USE, ProductDialog
from notifications import Notifier
from store import ActionResult, ProductStore


def form(sku, name="Pomada", quantity=8, price=11.0, purchase_price=5.0):
    return {
        "productName": name,
        "sku": sku,
        "quantity": quantity,
        "price": price,
        "purchasePrice": purchase_price,
    }


@pytest.fixture
def store(client, token):
    store = ProductStore(http=client, base_url="", token=token)
    store.load_categories()
    store.load_suppliers()
    return store


@pytest.fixture
def notifier():
    return Notifier()


@pytest.fixture
def dialog(store, notifier):
    return ProductDialog(store, notifier, user_id=1)


def test_add_product_closes_and_reloads(dialog, store, notifier, catalog):
    dialog.open()
    assert dialog.form_defaults()["productName"] == ""

    sku = unique_sku("POM")
    with mock.patch.object(store, "load_products", wraps=store.load_products) as reload:
        closed = dialog.submit(form(sku), catalog["category"]["id"], catalog["supplier"]["id"])
        assert reload.call_count == 1

    assert closed
    assert not dialog.is_open
    assert not dialog.is_submitting
    assert [p["sku"] for p in store.all_products] == [sku]
    assert store.all_products[0]["status"] == "Stock Bajo"
    assert notifier.last.title == "¡Producto creado exitosamente!"
    assert notifier.last.variant == "default"


def test_duplicate_sku_blocks_before_any_request(dialog, store, notifier, catalog):
    sku = unique_sku("POM")
    dialog.open()
    dialog.submit(form(sku), catalog["category"]["id"], catalog["supplier"]["id"])

    dialog.open()
    with mock.patch.object(store, "add_product") as add:
        assert not dialog.submit(form(sku.lower()))
        add.assert_not_called()
    assert dialog.errors["sku"] == SKU_IN_USE
    assert dialog.is_open
    assert dialog.check_sku(f"  {sku.upper()} ") == SKU_IN_USE


@pytest.mark.parametrize("data, field, message", [
    (form("ABC", name=""), "productName", "El nombre del producto es requerido"),
    (form("ABC", name="x" * 101), "productName", "El nombre del producto debe tener 100 caracteres o menos"),
    (form(""), "sku", "La referencia es requerida"),
    (form("AB C"), "sku", "La referencia debe ser alfanumérica"),
    (form("ABC", quantity=2.5), "quantity", "La cantidad debe ser un número entero"),
    (form("ABC", quantity=-1), "quantity", "La cantidad no puede ser negativa"),
    (form("ABC", price=-0.5), "price", "El precio no puede ser negativo"),
    (form("ABC", purchase_price=-3), "purchasePrice", "El precio de compra no puede ser negativo"),
    (form("ABC", price=""), "price", "El precio debe ser un número"),
    (form("ABC", purchase_price="abc"), "purchasePrice", "El precio de compra debe ser un número"),
])
def test_validation_messages(dialog, store, data, field, message):
    dialog.open()
    with mock.patch.object(store, "add_product") as add:
        assert not dialog.submit(data)
        add.assert_not_called()
    assert dialog.errors[field] == message


def test_edit_keeps_own_sku_and_updates(dialog, store, notifier, catalog):
    sku = unique_sku("EDT")
    dialog.open()
    dialog.submit(form(sku, quantity=2), catalog["category"]["id"], catalog["supplier"]["id"])
    product = store.all_products[0]

    dialog.open(product)
    defaults = dialog.form_defaults()
    assert defaults["sku"] == sku
    assert defaults["categoryId"] == catalog["category"]["id"]

    assert dialog.submit(form(sku, name="Pomada fuerte", quantity=40), catalog["category"]["id"], catalog["supplier"]["id"])
    assert store.all_products[0]["id"] == product["id"]
    assert store.all_products[0]["name"] == "Pomada fuerte"
    assert store.all_products[0]["status"] == "Disponible"
    assert notifier.last.title == "¡Producto actualizado exitosamente!"
    assert store.selected_product is None


def test_server_failure_keeps_dialog_open(dialog, store, notifier):
    dialog.open()
    with mock.patch.object(store, "add_product", return_value=ActionResult(success=False, error="boom")):
        assert not dialog.submit(form(unique_sku()))
    assert dialog.is_open
    assert notifier.last.title == "Error en la creación"
    assert notifier.last.variant == "destructive"


def test_update_failure_message(dialog, store, notifier):
    dialog.open({"id": 5, "name": "x", "sku": "X-1", "quantity": 1, "price": 1, "purchasePrice": 1})
    with mock.patch.object(store, "update_product", return_value=ActionResult(success=False)):
        assert not dialog.submit(form("X-1"))
    assert notifier.last.title == "Error en la actualización"


def test_unexpected_error_is_reported(dialog, store, notifier):
    dialog.open()
    with mock.patch.object(store, "add_product", side_effect=RuntimeError("kaput")):
        assert not dialog.submit(form(unique_sku()))
    assert notifier.last.title == "Operación fallida"
    assert not dialog.is_submitting
    assert dialog.is_open


def test_temporary_id_is_sent_in_add_path(dialog, store):
    dialog.open()
    with mock.patch.object(store, "add_product", return_value=ActionResult(success=True)) as add, \
            mock.patch.object(store, "load_products"):
        dialog.submit(form("TMP-1", quantity=0), "", "")
    sent = add.call_args.args[0]
    assert sent["id"].isdigit()
    assert sent["userId"] == 1
    assert sent["status"] == "Sin Stock"


def test_open_change_clears_selection(dialog, store):
    dialog.open({"id": 9})
    dialog.handle_open_change(False)
    assert store.selected_product is None
    assert not dialog.is_open
    dialog.handle_open_change(True)
    assert dialog.is_open
    assert dialog.editing is None


def test_missing_fields_show_spanish_messages(dialog, store):
    dialog.open()
    with mock.patch.object(store, "add_product") as add:
        assert not dialog.submit({"sku": "ABC"})
        add.assert_not_called()
    assert dialog.errors == {
        "productName": "El nombre del producto es requerido",
        "quantity": "La cantidad es requerida",
        "price": "El precio es requerido",
        "purchasePrice": "El precio de compra es requerido",
    }
