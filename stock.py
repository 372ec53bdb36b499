"""Stock-health rules shared by the API and the client-side controllers."""

AVAILABLE = "Disponible"
LOW_STOCK = "Stock Bajo"
OUT_OF_STOCK = "Sin Stock"

# above this a product is comfortably in stock
AVAILABLE_THRESHOLD = 20
# table highlights quantities strictly between 0 and this value
TABLE_LOW_STOCK_LIMIT = 10

UNKNOWN_NAME = "Desconocido"


def product_status(quantity: int) -> str:
    """Derive the stock label for a quantity."""
    if quantity > AVAILABLE_THRESHOLD:
        return AVAILABLE
    if 0 < quantity <= AVAILABLE_THRESHOLD:
        return LOW_STOCK
    return OUT_OF_STOCK


def increment(quantity: int) -> int:
    return quantity + 1


def decrement(quantity: int) -> int:
    # no-op at zero, quantities never go negative
    if quantity <= 0:
        return 0
    return quantity - 1


def is_low_stock(quantity: int) -> bool:
    return 0 < quantity < TABLE_LOW_STOCK_LIMIT


def is_out_of_stock(quantity: int) -> bool:
    return quantity == 0
