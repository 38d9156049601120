"""
Seed script: populate a development database with demo billing data.

What it creates:
- Owner user with credentials.
- Categories and products with GST rates and opening stock.
- Customers and suppliers.
- Purchases (increase stock) with a mix of unpaid, partial and full payments.
- Invoices (decrease stock) spread over the last few months so the aging
  reports have something in every bucket.

Run from the repository root:
    python scripts/seed_demo_data.py --email owner@demo.shop --password DemoShop!2025 \
        --products 60 --invoices 120 --purchases 40

Note: This is intended for development environments only.
"""

# Add project root to sys.path so `app.*` imports work even if CWD changes
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

import argparse
import random
from datetime import date, timedelta
from decimal import Decimal

from app.database.database import SessionLocal, Base, sync_engine
import app.main  # noqa: F401  registers every model
from app.modules.auth.models import User
from app.modules.auth.utils import hash_password
from app.modules.categories.models import Category
from app.modules.products.models import Product
from app.modules.contacts.models import Customer, Supplier
from app.modules.invoices.service import InvoiceService, PaymentService
from app.modules.invoices.schemas import InvoiceCreate, LineItemCreate, PaymentCreate
from app.modules.invoices.models import PaymentMethod
from app.modules.purchases.service import PurchaseService, PurchasePaymentService
from app.modules.purchases.schemas import PurchaseCreate
from app.modules.ledger import LedgerError
from fastapi import HTTPException

CATEGORIES = {
    "Groceries": ("1006", Decimal("5")),
    "Beverages": ("2202", Decimal("12")),
    "Personal Care": ("3305", Decimal("18")),
    "Household": ("3402", Decimal("18")),
    "Stationery": ("4820", Decimal("12")),
}

CITIES = ["Mumbai", "Pune", "Bengaluru", "Chennai", "Hyderabad", "Delhi"]


def pick(seq):
    return random.choice(seq)


def create_owner_user(db, email: str, password: str):
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user
    user = User(email=email, password=hash_password(password), full_name="Demo Owner", role="owner")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def create_categories(db):
    categories = []
    for name in CATEGORIES:
        category = db.query(Category).filter(Category.name == name).first()
        if not category:
            category = Category(name=name, description=f"{name} products")
            db.add(category)
        categories.append(category)
    db.commit()
    return categories


def create_products(db, categories, product_count: int):
    products = []
    for idx in range(product_count):
        category = pick(categories)
        hsn, gst_rate = CATEGORIES[category.name]
        sku = f"{category.name[:3].upper()}-{idx:05d}"
        product = db.query(Product).filter(Product.sku == sku).first()
        if not product:
            cost = Decimal(random.randint(20, 800))
            product = Product(
                name=f"{category.name} item {idx}",
                sku=sku,
                category_id=category.id,
                cost_price=cost,
                unit_price=(cost * Decimal("1.3")).quantize(Decimal("1")),
                stock_quantity=random.randint(20, 80),
                low_stock_threshold=10,
                hsn_sac_code=hsn,
                gst_rate=gst_rate,
            )
            db.add(product)
        products.append(product)
    db.commit()
    return products


def create_contacts(db, customers_count=30, suppliers_count=8):
    customers = [
        Customer(name=f"Customer {i}", email=f"customer{i}@example.com", city=pick(CITIES), country="India")
        for i in range(customers_count)
    ]
    suppliers = [
        Supplier(name=f"Supplier {i}", contact_person=f"Contact {i}", city=pick(CITIES), country="India")
        for i in range(suppliers_count)
    ]
    db.add_all(customers + suppliers)
    db.commit()
    return customers, suppliers


def random_payment(total: Decimal) -> PaymentCreate:
    share = pick([Decimal("0.25"), Decimal("0.5"), Decimal("1")])
    return PaymentCreate(
        amount=(total * share).quantize(Decimal("0.01")),
        payment_method=pick(list(PaymentMethod)),
        payment_date=date.today(),
    )


def create_purchases(db, suppliers, products, purchases_count, user_id):
    service = PurchaseService(db)
    payments = PurchasePaymentService(db)
    created = 0
    for _ in range(purchases_count):
        items = [
            LineItemCreate(product_id=prod.id, quantity=random.randint(10, 40))
            for prod in random.sample(products, k=random.randint(2, 5))
        ]
        purchase_date = date.today() - timedelta(days=random.randint(0, 150))
        data = PurchaseCreate(supplier_id=pick(suppliers).id, purchase_date=purchase_date, items=items)
        try:
            purchase = service.create_purchase(data, user_id)
            if random.random() < 0.6:
                payments.add_payment(purchase.id, random_payment(purchase.total_amount))
            created += 1
        except LedgerError as e:
            print(f"  Skipped purchase: {e.message}")
    return created


def create_invoices(db, customers, products, invoices_count, user_id):
    service = InvoiceService(db)
    payments = PaymentService(db)
    created = 0
    for _ in range(invoices_count):
        items = [
            LineItemCreate(
                product_id=prod.id,
                quantity=random.randint(1, 4),
                discount_percentage=pick([Decimal("0"), Decimal("0"), Decimal("5"), Decimal("10")])
            )
            for prod in random.sample(products, k=random.randint(1, 4))
        ]
        invoice_date = date.today() - timedelta(days=random.randint(0, 150))
        data = InvoiceCreate(customer_id=pick(customers).id, invoice_date=invoice_date, items=items)
        try:
            invoice = service.create_invoice(data, user_id)
            if random.random() < 0.5:
                payments.add_payment(invoice.id, random_payment(invoice.total_amount))
            created += 1
        except LedgerError as e:
            print(f"  Skipped invoice: {e.message}")
        except HTTPException as e:
            # Insufficient stock
            print(f"  Skipped invoice: {e.detail}")
    return created


def main():
    parser = argparse.ArgumentParser(description="Seed demo billing data")
    parser.add_argument("--email", default="owner@demo.shop")
    parser.add_argument("--password", default="DemoShop!2025")
    parser.add_argument("--products", type=int, default=60)
    parser.add_argument("--invoices", type=int, default=120)
    parser.add_argument("--purchases", type=int, default=40)
    args = parser.parse_args()

    Base.metadata.create_all(bind=sync_engine)
    db = SessionLocal()
    try:
        user = create_owner_user(db, args.email, args.password)
        categories = create_categories(db)

        print("Creating products...")
        products = create_products(db, categories, args.products)
        print(f"Products: {len(products)}")

        print("Creating customers and suppliers...")
        customers, suppliers = create_contacts(db)
        print(f"Customers: {len(customers)}, Suppliers: {len(suppliers)}")

        print("Creating purchases (increase stock)...")
        print(f"Purchases created: {create_purchases(db, suppliers, products, args.purchases, user.id)}")

        print("Creating invoices (decrease stock)...")
        print(f"Invoices created: {create_invoices(db, customers, products, args.invoices, user.id)}")

        print("\nSeed completed.")
        print("Login credentials:")
        print(f"  Email:    {args.email}")
        print(f"  Password: {args.password}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
