import io
import logging
import pandas as pd
from config import settings
from sqlalchemy import text
from typing import List
from sqlalchemy.orm import Session
from datetime import datetime, timezone
import models, schema, authentication, database, analytics, stock
from fastapi.responses import Response, StreamingResponse
from fastapi.security import OAuth2PasswordRequestForm
from fastapi import FastAPI, Depends, HTTPException, status

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

models.Base.metadata.create_all(bind=database.db_engine)

app = FastAPI(title= settings.PROJECT_NAME, version = settings.VERSION)

SKU_TAKEN = "SKU debe ser único"
CREATE_FAILED = "Fallo al crear el producto"
LIST_FAILED = "Fallo al obtener los productos"
UPDATE_FAILED = "Fallo al actualizar el producto"
QUANTITY_FAILED = "Fallo al actualizar la cantidad"
DELETE_FAILED = "Fallo al eliminar el producto"


class ProductNotFound(LookupError):
    pass


def _display_name(db: Session, model, ref_id):
    if ref_id is None:
        return stock.UNKNOWN_NAME
    row = db.query(model).filter(model.id == ref_id).first()
    return row.name if row else stock.UNKNOWN_NAME

def _iso(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.isoformat()

def product_to_out(db: Session, p: models.Product) -> schema.ProductOut:
    return schema.ProductOut(
        id=p.id,
        name=p.name,
        sku=p.sku,
        price=p.price,
        purchase_price=p.purchase_price,
        quantity=int(p.quantity),
        status=p.status,
        user_id=p.user_id,
        category_id=p.category_id,
        supplier_id=p.supplier_id,
        created_at=_iso(p.created_at),
        category=_display_name(db, models.Category, p.category_id),
        supplier=_display_name(db, models.Supplier, p.supplier_id),
    )

def _owned_product(db: Session, product_id: int, user: models.User) -> models.Product:
    db_product = (
        db.query(models.Product)
        .filter(models.Product.id == product_id, models.Product.user_id == user.id)
        .first()
    )
    if not db_product:
        raise ProductNotFound(product_id)
    return db_product

def _persistence_failure(db: Session, detail: str):
    db.rollback()
    logger.exception(detail)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


# basic info
@app.get("/", tags=["System"])
def basic_info():
    basic_details = {
        "app_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
    }
    return basic_details

# app health
@app.get("/health", tags=["System"])
def health_status(db: Session = Depends(database.obtain_db_session)):
    health_report = {
        "app_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "server_time": datetime.now(timezone.utc).isoformat(),
        "services": {
            "api": "online",
            "database": "unknown"
        }
    }

    try:
        db.execute(text("SELECT 1"))
        health_report["services"]["database"] = "online"
        return health_report
    except Exception as e:
        logger.warning("Database health probe failed: %s", e)
        health_report["services"]["database"] = "offline"
        health_report["error_details"] = str(e)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=health_report
        )

# login auth check
@app.post("/register", response_model=schema.Token, tags=["Auth"])
def register_user(user: schema.UserCreate, db: Session = Depends(database.obtain_db_session)):
    db_user = db.query(models.User).filter(models.User.username == user.username).first()
    if db_user:
        raise HTTPException(status_code=400, detail="Username already registered")
    hashed_pwd = authentication.get_password_hash(user.password)
    new_user = models.User(username=user.username, hashed_password=hashed_pwd)
    db.add(new_user)
    db.commit()
    logger.info("Registered user %s", user.username)
    access_token = authentication.generate_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}

@app.post("/login", response_model=schema.Token, tags=["Auth"])
def login_handler(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(database.obtain_db_session)):
    user = db.query(models.User).filter(models.User.username == form_data.username).first()
    if not user or not authentication.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Incorrect creds")
    access_token = authentication.generate_access_token(data={"sub": user.username})
    return {"access_token": access_token, "token_type": "bearer"}


# reference data
@app.post("/categories/", response_model=schema.Category, tags=["Catalog"])
def create_category(category: schema.CategoryCreate, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    db_cat = models.Category(name=category.name)
    db.add(db_cat)
    db.commit()
    db.refresh(db_cat)
    return db_cat

@app.get("/categories/", response_model=List[schema.Category], tags=["Catalog"])
def read_categories(db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    return db.query(models.Category).order_by(models.Category.name).all()

@app.post("/suppliers/", response_model=schema.Supplier, tags=["Catalog"])
def create_supplier(supplier: schema.SupplierCreate, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    db_sup = models.Supplier(name=supplier.name, contact_email=supplier.contact_email)
    db.add(db_sup)
    db.commit()
    db.refresh(db_sup)
    return db_sup

@app.get("/suppliers/", response_model=List[schema.Supplier], tags=["Catalog"])
def read_suppliers(db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    return db.query(models.Supplier).order_by(models.Supplier.name).all()


# product crud
@app.post("/products/", response_model=schema.ProductOut, status_code=status.HTTP_201_CREATED, tags=["Products"])
def create_product(product: schema.ProductCreate, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    try:
        existing = db.query(models.Product).filter(models.Product.sku == product.sku).first()
        if existing:
            raise HTTPException(status_code=400, detail=SKU_TAKEN)
        db_product = models.Product(
            **product.model_dump(),
            status=stock.product_status(product.quantity),
            user_id=current_user.id,
            created_at=models.utc_now(),
        )
        db.add(db_product)
        db.commit()
        db.refresh(db_product)
        logger.info("User %s created product %s (%s)", current_user.id, db_product.id, db_product.sku)
        return product_to_out(db, db_product)
    except HTTPException:
        raise
    except Exception:
        raise _persistence_failure(db, CREATE_FAILED)

@app.get("/products/", response_model=List[schema.ProductOut], tags=["Products"])
def read_products(db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    try:
        products = (
            db.query(models.Product)
            .filter(models.Product.user_id == current_user.id)
            .order_by(models.Product.id)
            .all()
        )
        logger.debug("Loaded %d products for user %s", len(products), current_user.id)
        return [product_to_out(db, p) for p in products]
    except Exception:
        raise _persistence_failure(db, LIST_FAILED)

@app.get("/products/analytics", response_model=schema.AnalyticsSummary, tags=["Products"])
def read_product_analytics(db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    products = read_products(db=db, current_user=current_user)
    return analytics.compute_analytics(p.model_dump(by_alias=True) for p in products)

@app.put("/products/{product_id}", response_model=schema.ProductOut, tags=["Products"])
def update_product(product_id: int, product_update: schema.ProductCreate, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    try:
        db_product = _owned_product(db, product_id, current_user)
        for key, value in product_update.model_dump().items():
            setattr(db_product, key, value)
        db_product.status = stock.product_status(product_update.quantity)
        db.commit()
        db.refresh(db_product)
        return product_to_out(db, db_product)
    except Exception:
        raise _persistence_failure(db, UPDATE_FAILED)

@app.patch("/products/{product_id}", response_model=schema.ProductOut, tags=["Products"])
def update_product_quantity(product_id: int, change: schema.QuantityUpdate, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    try:
        db_product = _owned_product(db, product_id, current_user)
        db_product.quantity = change.quantity
        db_product.status = stock.product_status(change.quantity)
        db.commit()
        db.refresh(db_product)
        return product_to_out(db, db_product)
    except Exception:
        raise _persistence_failure(db, QUANTITY_FAILED)

@app.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT, tags=["Products"])
def delete_product(product_id: int, db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    try:
        db_product = _owned_product(db, product_id, current_user)
        db.delete(db_product)
        db.commit()
    except Exception:
        raise _persistence_failure(db, DELETE_FAILED)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# app generate report
@app.get("/report/inventory", tags=["Reports"])
def get_inventory_report(db: Session = Depends(database.obtain_db_session), current_user: models.User = Depends(authentication.get_current_user)):
    query = db.query(models.Product).filter(models.Product.user_id == current_user.id).statement
    df = pd.read_sql(query, db.bind)

    df['status'] = df['quantity'].apply(stock.product_status)
    df['total_value'] = df['price'] * df['quantity']

    stream = io.StringIO()
    df.to_csv(stream, index=False)
    response = StreamingResponse(iter([stream.getvalue()]), media_type="text/csv")
    response.headers["Content-Disposition"] = "attachment; filename=inventory_report.csv"
    return response
