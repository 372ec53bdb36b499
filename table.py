"""Product table: display rows, sorting and the +/- quantity controls."""
from typing import Any, Dict, List, Optional

import stock
from notifications import DESTRUCTIVE, Notifier
from store import ActionResult, ProductStore

SORTABLE_COLUMNS = ("createdAt", "name", "sku", "quantity", "price", "status")


def format_price(price) -> str:
    return f"€{float(price):.2f}"


class ProductTable:
    def __init__(self, store: ProductStore, notifier: Notifier):
        self.store = store
        self.notifier = notifier
        self.sort_column: Optional[str] = None
        self.sort_descending = False

    def sort_by(self, column: str, descending: bool = False):
        if column not in SORTABLE_COLUMNS:
            raise ValueError(f"Column {column!r} is not sortable")
        self.sort_column = column
        self.sort_descending = descending

    def _row(self, product: Dict[str, Any]) -> Dict[str, Any]:
        quantity = int(product["quantity"])
        return {
            "id": product["id"],
            "createdAt": product.get("createdAt"),
            "name": product["name"],
            "sku": product["sku"],
            "quantity": quantity,
            "price": format_price(product["price"]),
            # the label shown is always derived from the live quantity
            "status": stock.product_status(quantity),
            "category": product.get("category") or stock.UNKNOWN_NAME,
            "supplier": product.get("supplier") or stock.UNKNOWN_NAME,
            "lowStock": stock.is_low_stock(quantity),
            "outOfStock": stock.is_out_of_stock(quantity),
        }

    def rows(self) -> List[Dict[str, Any]]:
        products = list(self.store.all_products)
        if self.sort_column is not None:
            column = self.sort_column
            if column == "status":
                key = lambda p: stock.product_status(int(p["quantity"]))
            else:
                key = lambda p: p.get(column)
            products.sort(key=key, reverse=self.sort_descending)
        return [self._row(p) for p in products]

    def _notify(self, result: ActionResult, description: str):
        if result.success:
            self.notifier.toast("Cantidad actualizada", description)
        else:
            self.notifier.toast("Error", "No se pudo actualizar la cantidad", DESTRUCTIVE)

    def increment(self, product_id) -> ActionResult:
        product = self.store.find_product(product_id)
        if product is None:
            raise KeyError(product_id)
        quantity = stock.increment(int(product["quantity"]))
        result = self.store.update_product_quantity(product_id, quantity)
        self._notify(result, f"La cantidad se incrementó a {quantity}")
        return result

    def decrement(self, product_id) -> Optional[ActionResult]:
        """Lower the quantity by one; at zero nothing is sent and None is returned."""
        product = self.store.find_product(product_id)
        if product is None:
            raise KeyError(product_id)
        current = int(product["quantity"])
        if current <= 0:
            return None
        quantity = stock.decrement(current)
        result = self.store.update_product_quantity(product_id, quantity)
        self._notify(result, f"La cantidad se decrementó a {quantity}")
        return result
