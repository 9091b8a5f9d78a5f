from __future__ import annotations

from decimal import Decimal

from django.core.management.base import BaseCommand

from modules.products.models import Product, ProductCategory

SAMPLE_PRODUCTS = [
    ("Laptop Pro 14", "14-inch laptop with 16GB RAM and 512GB SSD.", "1299.00", ProductCategory.ELECTRONICS, 15),
    ("Wireless Mouse", "Ergonomic wireless mouse with USB receiver.", "24.90", ProductCategory.ELECTRONICS, 80),
    ("Noise Cancelling Headphones", "Over-ear headphones with active noise cancelling.", "199.99", ProductCategory.ELECTRONICS, 6),
    ("Cotton T-Shirt", "Plain crew-neck t-shirt, 100% organic cotton.", "12.50", ProductCategory.CLOTHING, 120),
    ("Rain Jacket", "Lightweight waterproof jacket with hood.", "79.00", ProductCategory.CLOTHING, 4),
    ("Arabica Coffee Beans", "1kg bag of medium roast arabica coffee beans.", "18.75", ProductCategory.FOOD, 40),
    ("Dark Chocolate Bar", "70% cocoa dark chocolate bar, 100g.", "3.20", ProductCategory.FOOD, 9),
    ("Python Cookbook", "Recipes for mastering Python 3, third edition.", "45.00", ProductCategory.BOOKS, 25),
    ("Domain-Driven Design", "Tackling complexity in the heart of software.", "54.90", ProductCategory.BOOKS, 2),
    ("Gift Card", "Store gift card redeemable for any product.", "50.00", ProductCategory.OTHER, 0),
]


class Command(BaseCommand):
    help = "Seed the database with a sample product catalogue."

    def handle(self, *args, **options):
        self.stdout.write("Seeding products...")
        created = 0
        for name, description, price, category, stock in SAMPLE_PRODUCTS:
            _, was_created = Product.objects.get_or_create(
                name__iexact=name,
                defaults={
                    "name": name,
                    "description": description,
                    "price": Decimal(price),
                    "category": category,
                    "stock": stock,
                },
            )
            created += int(was_created)

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: products={created} created, "
                f"{len(SAMPLE_PRODUCTS) - created} already present"
            )
        )
