"""Derived inventory statistics for the dashboard.

Everything here is a pure function of the product list (products in the API
shape returned by ``GET /products/``), recomputed whenever that list changes.
Thresholds and price bands are fixed.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

CRITICAL_STOCK_MAX = 3
LOW_STOCK_MAX = 5
TOP_PRODUCTS_LIMIT = 5
LOW_STOCK_PRODUCTS_LIMIT = 6

NO_CATEGORY = "Sin Categoría"

PRICE_RANGES = [
    ("€0-€10", 0, 10),
    ("€10-€20", 10, 20),
    ("€20-€50", 20, 50),
    ("€50+", 50, None),
]

MONTHS = ["Ene", "Feb", "Mar", "Abr", "May", "Jun", "Jul", "Ago", "Sep", "Oct", "Nov", "Dic"]

# labels used when a product carries no stored status
FALLBACK_OUT = "Agotado"
FALLBACK_CRITICAL = "Crítico"
FALLBACK_LOW = "Bajo"
FALLBACK_HEALTHY = "Saludable"


def empty_summary() -> Dict[str, Any]:
    return {
        "total_reference_types": 0,
        "total_value": 0,
        "total_units": 0,
        "average_unit_cost": 0,
        "units_per_reference": 0,
        "low_stock_items": 0,
        "critical_stock_items": 0,
        "out_of_stock_items": 0,
        "top_category": {"name": "N/A", "value": 0, "percentage": 0},
        "category_distribution": [],
        "status_distribution": [],
        "price_range_distribution": [],
        "monthly_trend": [],
        "top_products": [],
        "low_stock_products": [],
    }


def _quantity(product: Mapping[str, Any]) -> int:
    return int(product.get("quantity") or 0)


def _value(product: Mapping[str, Any]) -> float:
    return float(product.get("price") or 0) * _quantity(product)


def _created_at(product: Mapping[str, Any]) -> Optional[datetime]:
    raw = product.get("createdAt", product.get("created_at"))
    if raw is None:
        return None
    if isinstance(raw, datetime):
        moment = raw
    else:
        try:
            moment = datetime.fromisoformat(str(raw))
        except ValueError:
            return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def fallback_status(quantity: int) -> str:
    if quantity == 0:
        return FALLBACK_OUT
    if quantity <= CRITICAL_STOCK_MAX:
        return FALLBACK_CRITICAL
    if quantity <= LOW_STOCK_MAX:
        return FALLBACK_LOW
    return FALLBACK_HEALTHY


def category_distribution(products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    buckets: Dict[str, Dict[str, Any]] = {}
    for product in products:
        name = product.get("category") or NO_CATEGORY
        bucket = buckets.setdefault(name, {"name": name, "value": 0, "quantity": 0, "count": 0})
        bucket["count"] += 1
        bucket["quantity"] += _quantity(product)
        bucket["value"] += _value(product)
    return list(buckets.values())


def top_category(distribution: List[Dict[str, Any]], total_value: float) -> Dict[str, Any]:
    best = {"name": "Ninguna", "value": 0}
    for entry in distribution:
        if entry["value"] > best["value"]:
            best = {"name": entry["name"], "value": entry["value"]}
    percentage = (best["value"] / total_value) * 100 if total_value > 0 else 0
    return {"name": best["name"], "value": best["value"], "percentage": percentage}


def price_range_distribution(products: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    result = []
    for name, low, high in PRICE_RANGES:
        if high is None:
            count = sum(1 for p in products if float(p.get("price") or 0) >= low)
        else:
            count = sum(1 for p in products if low <= float(p.get("price") or 0) < high)
        result.append({"name": name, "value": count})
    return result


def status_distribution(products: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    counts: Dict[str, int] = {}
    for product in products:
        status = product.get("status") or fallback_status(_quantity(product))
        counts[status] = counts.get(status, 0) + 1
    return [{"name": name, "value": value} for name, value in counts.items()]


def monthly_trend(products: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Cumulative creations per month of the year the first product was created in."""
    per_month: Dict[tuple, int] = {}
    for product in products:
        moment = _created_at(product)
        if moment is None:
            continue
        key = (moment.year, moment.month)
        per_month[key] = per_month.get(key, 0) + 1

    # an undated first product leaves every month empty
    first = _created_at(products[0]) if products else None
    year = first.year if first else None

    trend = []
    cumulative = 0
    for index, month in enumerate(MONTHS, start=1):
        added = per_month.get((year, index), 0)
        cumulative += added
        trend.append({"month": month, "products": cumulative, "monthly_added": added})
    return trend


def top_products(products: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    ranked = sorted(products, key=_value, reverse=True)
    return [
        {"name": p.get("name"), "value": _value(p), "quantity": _quantity(p)}
        for p in ranked[:TOP_PRODUCTS_LIMIT]
    ]


def low_stock_products(products: List[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    # candidates come in value order, so equal quantities list the dearest first
    ranked = sorted(products, key=_value, reverse=True)
    short = [p for p in ranked if 0 <= _quantity(p) <= LOW_STOCK_MAX]
    short.sort(key=_quantity)
    return [dict(p) for p in short[:LOW_STOCK_PRODUCTS_LIMIT]]


def compute_analytics(products: Iterable[Mapping[str, Any]]) -> Dict[str, Any]:
    """Aggregate a product list into the dashboard summary."""
    products = list(products)
    if not products:
        return empty_summary()

    total_reference_types = len(products)
    total_value = sum(_value(p) for p in products)
    total_units = sum(_quantity(p) for p in products)
    average_unit_cost = total_value / total_units if total_units > 0 else 0

    quantities = [_quantity(p) for p in products]
    categories = category_distribution(products)

    return {
        "total_reference_types": total_reference_types,
        "total_value": total_value,
        "total_units": total_units,
        "average_unit_cost": average_unit_cost,
        "units_per_reference": total_units / total_reference_types,
        "low_stock_items": sum(1 for q in quantities if CRITICAL_STOCK_MAX < q <= LOW_STOCK_MAX),
        "critical_stock_items": sum(1 for q in quantities if 0 < q <= CRITICAL_STOCK_MAX),
        "out_of_stock_items": sum(1 for q in quantities if q == 0),
        "top_category": top_category(categories, total_value),
        "category_distribution": categories,
        "status_distribution": status_distribution(products),
        "price_range_distribution": price_range_distribution(products),
        "monthly_trend": monthly_trend(products),
        "top_products": top_products(products),
        "low_stock_products": low_stock_products(products),
    }
