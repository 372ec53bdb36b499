"""Client-side product state container.

``ProductStore`` keeps the product, category and supplier lists the dashboard
renders plus the dialog/selection state. Every CRUD action is a single API
request; local state only changes after the server confirms it.
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from config import settings

logger = logging.getLogger(__name__)

PAYLOAD_FIELDS = ("name", "sku", "price", "purchasePrice", "quantity", "categoryId", "supplierId")


@dataclass
class ActionResult:
    success: bool
    error: Optional[str] = None
    product: Optional[Dict[str, Any]] = None


def _error_message(response) -> str:
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict):
        detail = body.get("detail", body.get("error"))
        if detail is not None:
            return str(detail)
    return f"HTTP {response.status_code}"


def _payload(product: Dict[str, Any]) -> Dict[str, Any]:
    payload = {key: product.get(key) for key in PAYLOAD_FIELDS}
    for ref in ("categoryId", "supplierId"):
        # an empty select means no reference
        if payload[ref] in ("", None):
            payload[ref] = None
    return payload


class ProductStore:
    def __init__(self, http=None, base_url: Optional[str] = None, token: Optional[str] = None):
        # anything exposing requests' get/post/put/patch/delete works here
        self.http = http if http is not None else requests.Session()
        self.base_url = (settings.API_BASE_URL if base_url is None else base_url).rstrip("/")
        self.token = token

        self.all_products: List[Dict[str, Any]] = []
        self.categories: List[Dict[str, Any]] = []
        self.suppliers: List[Dict[str, Any]] = []
        self.selected_product: Optional[Dict[str, Any]] = None
        self.open_product_dialog = False
        self.open_dialog = False
        self.is_loading = False

    # --- ui state ---
    def set_selected_product(self, product: Optional[Dict[str, Any]]):
        self.selected_product = product

    def set_open_product_dialog(self, is_open: bool):
        self.open_product_dialog = is_open

    def set_open_dialog(self, is_open: bool):
        self.open_dialog = is_open

    def find_product(self, product_id) -> Optional[Dict[str, Any]]:
        for product in self.all_products:
            if str(product["id"]) == str(product_id):
                return product
        return None

    # --- transport ---
    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _send(self, method: str, path: str, **kwargs):
        call = getattr(self.http, method)
        return call(self._url(path), headers=self._headers(), **kwargs)

    def _replace_local(self, product: Dict[str, Any]):
        self.all_products = [
            product if str(p["id"]) == str(product["id"]) else p for p in self.all_products
        ]

    # --- loading ---
    def _load_list(self, path: str, label: str) -> ActionResult:
        self.is_loading = True
        try:
            response = self._send("get", path)
        except requests.RequestException as exc:
            logger.warning("Could not load %s: %s", label, exc)
            return ActionResult(success=False, error=str(exc))
        finally:
            self.is_loading = False
        if response.status_code != 200:
            message = _error_message(response)
            logger.warning("Could not load %s: %s", label, message)
            return ActionResult(success=False, error=message)
        setattr(self, label, response.json())
        return ActionResult(success=True)

    def load_products(self) -> ActionResult:
        return self._load_list("/products/", "all_products")

    def load_categories(self) -> ActionResult:
        return self._load_list("/categories/", "categories")

    def load_suppliers(self) -> ActionResult:
        return self._load_list("/suppliers/", "suppliers")

    # --- crud ---
    def add_product(self, product: Dict[str, Any]) -> ActionResult:
        """Create ``product``; its temporary client id is replaced by the server's."""
        try:
            response = self._send("post", "/products/", json=_payload(product))
        except requests.RequestException as exc:
            logger.warning("Could not add product %s: %s", product.get("sku"), exc)
            return ActionResult(success=False, error=str(exc))
        if response.status_code != 201:
            message = _error_message(response)
            logger.warning("Could not add product %s: %s", product.get("sku"), message)
            return ActionResult(success=False, error=message)
        created = response.json()
        self.all_products = self.all_products + [created]
        return ActionResult(success=True, product=created)

    def update_product(self, product: Dict[str, Any]) -> ActionResult:
        try:
            response = self._send("put", f"/products/{product['id']}", json=_payload(product))
        except requests.RequestException as exc:
            logger.warning("Could not update product %s: %s", product["id"], exc)
            return ActionResult(success=False, error=str(exc))
        if response.status_code != 200:
            message = _error_message(response)
            logger.warning("Could not update product %s: %s", product["id"], message)
            return ActionResult(success=False, error=message)
        updated = response.json()
        self._replace_local(updated)
        return ActionResult(success=True, product=updated)

    def update_product_quantity(self, product_id, quantity: int) -> ActionResult:
        try:
            response = self._send("patch", f"/products/{product_id}", json={"quantity": quantity})
        except requests.RequestException as exc:
            logger.warning("Could not update quantity of %s: %s", product_id, exc)
            return ActionResult(success=False, error=str(exc))
        if response.status_code != 200:
            message = _error_message(response)
            logger.warning("Could not update quantity of %s: %s", product_id, message)
            return ActionResult(success=False, error=message)
        updated = response.json()
        self._replace_local(updated)
        return ActionResult(success=True, product=updated)

    def delete_product(self, product_id) -> ActionResult:
        try:
            response = self._send("delete", f"/products/{product_id}")
        except requests.RequestException as exc:
            logger.warning("Could not delete product %s: %s", product_id, exc)
            return ActionResult(success=False, error=str(exc))
        if response.status_code != 204:
            message = _error_message(response)
            logger.warning("Could not delete product %s: %s", product_id, message)
            return ActionResult(success=False, error=message)
        self.all_products = [p for p in self.all_products if str(p["id"]) != str(product_id)]
        return ActionResult(success=True)
