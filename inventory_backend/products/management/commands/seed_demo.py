import logging
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from customers.models import Customer
from products.models import Category, Product
from products.services.adjustments import INITIAL_STOCK_REFERENCE, set_stock_level
from purchases.models import ProductSupplier, Supplier

User = get_user_model()
logger = logging.getLogger("inventory")


class Command(BaseCommand):
    help = "Seed an admin user, categories, products, a supplier and a customer"

    def add_arguments(self, parser):
        parser.add_argument("--admin-email", default="admin@inventory.com")
        parser.add_argument("--admin-password", default="Admin@123")

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding demo data..."))

        # -------------------------------
        # ADMIN
        # -------------------------------
        email = options["admin_email"].strip().lower()
        admin = User.objects.filter(email=email).first()
        if admin is None:
            admin = User.objects.create_superuser(
                email=email,
                password=options["admin_password"],
                name="Admin User",
            )
            self.stdout.write(f"Created admin {email}")

        # -------------------------------
        # CATEGORIES
        # -------------------------------
        categories = [
            ("Groceries", "Food and daily necessity items"),
            ("Dairy", "Milk, cheese, and other dairy products"),
            ("Beverages", "Drinks and liquid refreshments"),
        ]

        category_objs = {}
        for name, description in categories:
            obj, _ = Category.objects.get_or_create(
                name=name, defaults={"description": description}
            )
            category_objs[name] = obj

        # -------------------------------
        # PRODUCTS
        # -------------------------------
        products_data = [
            ("RC-001", "Rice (5kg)", "Groceries", "12.99", "9.50", 100),
            ("ML-001", "Fresh Milk (1L)", "Dairy", "2.49", "1.60", 50),
            ("CF-001", "Ground Coffee (250g)", "Beverages", "6.99", "4.20", 5),
        ]

        product_objs = []
        for sku, name, cat, price, cost, quantity in products_data:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category_objs[cat],
                    "price": Decimal(price),
                    "cost_price": Decimal(cost),
                    "quantity": 0,
                    "owner": admin,
                },
            )
            if created:
                product = set_stock_level(
                    product_id=product.pk,
                    quantity=quantity,
                    reference=INITIAL_STOCK_REFERENCE,
                    notes="Seed stock",
                    user=admin,
                )
            product_objs.append(product)

        # -------------------------------
        # SUPPLIER + CUSTOMER
        # -------------------------------
        supplier, _ = Supplier.objects.get_or_create(
            name="Acme Wholesale",
            defaults={"email": "orders@acme.example", "phone": "555-0100"},
        )
        for idx, product in enumerate(product_objs):
            ProductSupplier.objects.get_or_create(
                product=product,
                supplier=supplier,
                defaults={"is_preferred": idx == 0, "unit_price": product.cost_price},
            )

        Customer.objects.get_or_create(
            email="jane@example.com",
            defaults={"name": "Jane Doe", "phone": "555-0199", "city": "Springfield"},
        )

        logger.info("Demo data seeded", extra={"products": len(product_objs)})
        self.stdout.write(self.style.SUCCESS("Demo data seeded successfully"))
