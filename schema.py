import re
from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from typing import Any, Dict, List, Optional

SKU_PATTERN = r"^[a-zA-Z0-9_-]+$"
NAME_MAX_LENGTH = 100

class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True

# --- Auth Schemas ---
class Token(BaseModel):
    access_token: str
    token_type: str

class UserCreate(BaseModel):
    username: str
    password: str

# --- Category Schemas ---
class CategoryBase(BaseModel):
    name: str

class CategoryCreate(CategoryBase):
    pass

class Category(CategoryBase):
    id: int
    class Config:
        from_attributes = True

# --- Supplier Schemas ---
class SupplierBase(BaseModel):
    name: str
    contact_email: Optional[str] = None

class SupplierCreate(SupplierBase):
    pass

class Supplier(SupplierBase):
    id: int
    class Config:
        from_attributes = True

# --- Product Schemas ---
class ProductCreate(CamelModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LENGTH)
    sku: str = Field(min_length=1, pattern=SKU_PATTERN)
    price: float = Field(ge=0)
    purchase_price: float = Field(ge=0)
    quantity: int = Field(ge=0)
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None

class QuantityUpdate(CamelModel):
    quantity: int = Field(ge=0)

class ProductOut(CamelModel):
    id: int
    name: str
    sku: str
    price: float
    purchase_price: float
    quantity: int
    status: str
    user_id: int
    category_id: Optional[int] = None
    supplier_id: Optional[int] = None
    created_at: str
    category: str
    supplier: str

# --- Dialog form ---
class ProductForm(CamelModel):
    """Fields of the add/edit product dialog, with the messages shown inline."""
    product_name: str
    sku: str
    quantity: int
    price: float
    purchase_price: float

    @field_validator("product_name")
    @classmethod
    def check_product_name(cls, value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("name_required", "El nombre del producto es requerido")
        if len(value) > NAME_MAX_LENGTH:
            raise PydanticCustomError(
                "name_too_long", "El nombre del producto debe tener 100 caracteres o menos"
            )
        return value

    @field_validator("sku")
    @classmethod
    def check_sku(cls, value: str) -> str:
        if len(value) < 1:
            raise PydanticCustomError("sku_required", "La referencia es requerida")
        if not re.match(SKU_PATTERN, value):
            raise PydanticCustomError("sku_format", "La referencia debe ser alfanumérica")
        return value

    @field_validator("quantity", mode="before")
    @classmethod
    def check_quantity_is_integer(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PydanticCustomError("quantity_int", "La cantidad debe ser un número entero")
        if isinstance(value, float) and not value.is_integer():
            raise PydanticCustomError("quantity_int", "La cantidad debe ser un número entero")
        return int(value)

    @field_validator("quantity")
    @classmethod
    def check_quantity(cls, value: int) -> int:
        if value < 0:
            raise PydanticCustomError("quantity_negative", "La cantidad no puede ser negativa")
        return value

    @field_validator("price", mode="before")
    @classmethod
    def check_price_is_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PydanticCustomError("price_number", "El precio debe ser un número")
        return value

    @field_validator("purchase_price", mode="before")
    @classmethod
    def check_purchase_price_is_number(cls, value: Any) -> Any:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise PydanticCustomError(
                "purchase_price_number", "El precio de compra debe ser un número"
            )
        return value

    @field_validator("price")
    @classmethod
    def check_price(cls, value: float) -> float:
        if value < 0:
            raise PydanticCustomError("price_negative", "El precio no puede ser negativo")
        return value

    @field_validator("purchase_price")
    @classmethod
    def check_purchase_price(cls, value: float) -> float:
        if value < 0:
            raise PydanticCustomError(
                "purchase_price_negative", "El precio de compra no puede ser negativo"
            )
        return value

# --- Analytics Schemas ---
class CategorySlice(CamelModel):
    name: str
    value: float
    quantity: int
    count: int

class NamedCount(CamelModel):
    name: str
    value: int

class MonthPoint(CamelModel):
    month: str
    products: int
    monthly_added: int

class TopProduct(CamelModel):
    name: str
    value: float
    quantity: int

class TopCategory(CamelModel):
    name: str
    value: float
    percentage: float

class AnalyticsSummary(CamelModel):
    total_reference_types: int
    total_value: float
    total_units: int
    average_unit_cost: float
    units_per_reference: float
    low_stock_items: int
    critical_stock_items: int
    out_of_stock_items: int
    top_category: TopCategory
    category_distribution: List[CategorySlice]
    status_distribution: List[NamedCount]
    price_range_distribution: List[NamedCount]
    monthly_trend: List[MonthPoint]
    top_products: List[TopProduct]
    low_stock_products: List[Dict[str, Any]]
