"""Add/edit product dialog controller."""
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError

import schema
import stock
from notifications import DESTRUCTIVE, Notifier
from store import ProductStore

logger = logging.getLogger(__name__)

SKU_IN_USE = "La referencia ya está en uso. Intenta con una nueva."

# shown when a form field is absent altogether
MISSING_MESSAGES = {
    "productName": "El nombre del producto es requerido",
    "sku": "La referencia es requerida",
    "quantity": "La cantidad es requerida",
    "price": "El precio es requerido",
    "purchasePrice": "El precio de compra es requerido",
}

EMPTY_FORM = {
    "productName": "",
    "sku": "",
    "quantity": 0,
    "price": 0.0,
    "purchasePrice": 0.0,
}


class ProductDialog:
    def __init__(self, store: ProductStore, notifier: Notifier, user_id=None):
        self.store = store
        self.notifier = notifier
        self.user_id = user_id
        self.is_submitting = False
        self.errors: Dict[str, str] = {}

    @property
    def is_open(self) -> bool:
        return self.store.open_product_dialog

    @property
    def editing(self) -> Optional[Dict[str, Any]]:
        return self.store.selected_product

    def open(self, product: Optional[Dict[str, Any]] = None):
        """Open empty for a new product, or pre-filled to edit ``product``."""
        self.store.set_selected_product(product)
        self.errors = {}
        self.store.set_open_product_dialog(True)

    def close(self):
        self.store.set_selected_product(None)
        self.store.set_open_product_dialog(False)

    def handle_open_change(self, is_open: bool):
        # the trigger button always opens an empty form
        self.store.set_selected_product(None)
        self.store.set_open_product_dialog(is_open)

    def form_defaults(self) -> Dict[str, Any]:
        product = self.editing
        if product is None:
            return dict(EMPTY_FORM, categoryId="", supplierId="")
        return {
            "productName": product["name"],
            "sku": product["sku"],
            "quantity": product["quantity"],
            "price": product["price"],
            "purchasePrice": product["purchasePrice"],
            "categoryId": product.get("categoryId") or "",
            "supplierId": product.get("supplierId") or "",
        }

    def check_sku(self, sku: str) -> Optional[str]:
        """Return the inline error for ``sku`` when another loaded product uses it."""
        wanted = sku.strip().lower()
        current = self.editing
        for product in self.store.all_products:
            if current is not None and str(product["id"]) == str(current["id"]):
                continue
            if product["sku"].lower() == wanted:
                return SKU_IN_USE
        return None

    def validate(self, data: Dict[str, Any]) -> Optional[schema.ProductForm]:
        self.errors = {}
        try:
            form = schema.ProductForm.model_validate(data)
        except ValidationError as exc:
            for error in exc.errors():
                field = str(error["loc"][0]) if error["loc"] else "form"
                if error["type"] == "missing":
                    message = MISSING_MESSAGES.get(field, error["msg"])
                else:
                    message = error["msg"]
                self.errors.setdefault(field, message)
            return None
        sku_error = self.check_sku(form.sku)
        if sku_error:
            self.errors["sku"] = sku_error
            return None
        return form

    def _build_product(self, form: schema.ProductForm, category_id, supplier_id) -> Dict[str, Any]:
        product = {
            "name": form.product_name,
            "sku": form.sku,
            "price": form.price,
            "purchasePrice": form.purchase_price,
            "quantity": form.quantity,
            "status": stock.product_status(form.quantity),
            "categoryId": category_id,
            "supplierId": supplier_id,
        }
        current = self.editing
        if current is None:
            product["id"] = str(int(time.time() * 1000))
            product["createdAt"] = datetime.now(timezone.utc)
            product["userId"] = self.user_id
        else:
            product["id"] = current["id"]
            product["createdAt"] = current.get("createdAt")
            product["userId"] = current.get("userId")
        return product

    def submit(self, data: Dict[str, Any], category_id=None, supplier_id=None) -> bool:
        """Validate and save the form. Returns True when the dialog closed."""
        form = self.validate(data)
        if form is None:
            return False

        self.is_submitting = True
        adding = self.editing is None
        try:
            product = self._build_product(form, category_id, supplier_id)
            if adding:
                result = self.store.add_product(product)
            else:
                result = self.store.update_product(product)

            if result.success:
                if adding:
                    self.notifier.toast(
                        "¡Producto creado exitosamente!",
                        f'"{form.product_name}" ha sido añadido a tu inventario.',
                    )
                else:
                    self.notifier.toast(
                        "¡Producto actualizado exitosamente!",
                        f'"{form.product_name}" ha sido actualizado en tu inventario.',
                    )
                self.store.load_products()
                self.close()
                return True

            if adding:
                self.notifier.toast(
                    "Error en la creación",
                    "No se pudo añadir el producto. Por favor, inténtalo de nuevo.",
                    DESTRUCTIVE,
                )
            else:
                self.notifier.toast(
                    "Error en la actualización",
                    "No se pudo actualizar el producto. Por favor, inténtalo de nuevo.",
                    DESTRUCTIVE,
                )
            return False
        except Exception:
            logger.exception("Unexpected failure while saving product %s", form.sku)
            self.notifier.toast(
                "Operación fallida",
                "Ocurrió un error inesperado. Por favor, inténtalo de nuevo.",
                DESTRUCTIVE,
            )
            return False
        finally:
            self.is_submitting = False
