# products/management/commands/seed_products.py

from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Product

Category = Product.Category

# (name, brand, category, price, original_price, stock, featured, image)
PRODUCTS_DATA = [
    (
        'MacBook Pro 16" M3 Max', "Apple", Category.LAPTOPS,
        "349900", "399900", 15, True,
        "https://images.unsplash.com/photo-1517336714731-489689fd1ca8?w=600",
    ),
    (
        "iPhone 15 Pro Max", "Apple", Category.SMARTPHONES,
        "159900", "174900", 30, True,
        "https://images.unsplash.com/photo-1592286927505-3fd13aa84ed0?w=600",
    ),
    (
        "Samsung Galaxy S24 Ultra", "Samsung", Category.SMARTPHONES,
        "129999", "139999", 25, True,
        "https://images.unsplash.com/photo-1610945415295-d9bbf067e59c?w=600",
    ),
    (
        "Dell XPS 15", "Dell", Category.LAPTOPS,
        "149999", "174999", 20, True,
        "https://images.unsplash.com/photo-1593642632823-8f785ba67e45?w=600",
    ),
    (
        "Sony WH-1000XM5", "Sony", Category.HEADPHONES,
        "29990", "34990", 50, True,
        "https://images.unsplash.com/photo-1546435770-a3e426bf472b?w=600",
    ),
    (
        'iPad Pro 12.9" M2', "Apple", Category.TABLETS,
        "112900", "129900", 18, False,
        "https://images.unsplash.com/photo-1544244015-0df4b3ffc6b0?w=600",
    ),
    (
        "Apple Watch Series 9", "Apple", Category.SMART_WATCHES,
        "45900", "54900", 40, True,
        "https://images.unsplash.com/photo-1579586337278-3befd40fd17a?w=600",
    ),
    (
        "PlayStation 5", "Sony", Category.GAMING,
        "54990", "0", 12, True,
        "https://images.unsplash.com/photo-1606813907291-d86efa9b94db?w=600",
    ),
    (
        "Logitech MX Master 3S", "Logitech", Category.ACCESSORIES,
        "8495", "9995", 60, False,
        "https://images.unsplash.com/photo-1527814050087-3793815479db?w=600",
    ),
    (
        "Canon EOS R6 Mark II", "Canon", Category.CAMERAS,
        "234990", "259990", 8, False,
        "https://images.unsplash.com/photo-1502920917128-1aa500764cbd?w=600",
    ),
    (
        "AirPods Pro (2nd Gen)", "Apple", Category.HEADPHONES,
        "26900", "0", 75, False,
        "https://images.unsplash.com/photo-1606841837239-c5a1a4a07af7?w=600",
    ),
    (
        "Microsoft Surface Pro 9", "Microsoft", Category.TABLETS,
        "119990", "139990", 14, False,
        "https://images.unsplash.com/photo-1585790050230-5dd28404ccb9?w=600",
    ),
]


class Command(BaseCommand):
    help = "Seed the demo electronics catalog with opening stock (idempotent)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        created_count = 0

        for name, brand, category, price, original, stock, featured, image in PRODUCTS_DATA:
            _, created = Product.objects.get_or_create(
                name=name,
                brand=brand,
                defaults={
                    "description": f"{brand} {name}",
                    "category": category,
                    "price": Decimal(price),
                    "original_price": Decimal(original),
                    "stock": stock,
                    "is_featured": featured,
                    "images": [image],
                },
            )
            if created:
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded. Created: {created_count}")
        )
