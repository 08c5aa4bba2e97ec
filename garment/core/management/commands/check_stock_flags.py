"""
Django management command to recompute the low/out-of-stock flags stored on
products and report any that had drifted from the stock quantity
"""
from django.core.management.base import BaseCommand
from django.db import transaction

from garment.catalog.models import Product


class Command(BaseCommand):
    help = 'Recompute product stock flags and report drift'

    def add_arguments(self, parser):
        parser.add_argument(
            '--product-id',
            type=int,
            help='Check specific product ID only',
        )
        parser.add_argument(
            '--dry-run',
            action='store_true',
            help='Report drift without saving corrected flags',
        )

    def handle(self, *args, **options):
        product_id = options.get('product_id')
        dry_run = options.get('dry_run', False)

        products = Product.objects.all().order_by('id')
        if product_id:
            products = products.filter(id=product_id)

        self.stdout.write("=" * 60)
        self.stdout.write(self.style.SUCCESS("PRODUCT STOCK FLAG CHECK"))
        self.stdout.write("=" * 60)
        self.stdout.write(f"Total Products: {products.count()}")

        drifted = []
        with transaction.atomic():
            for product in products.select_for_update():
                stored = (product.is_low_stock, product.is_out_of_stock)
                product.refresh_stock_flags()
                expected = (product.is_low_stock, product.is_out_of_stock)
                if stored == expected:
                    continue

                drifted.append(product)
                self.stdout.write(self.style.WARNING(
                    f"  {product.name} (ID: {product.id}) quantity={product.quantity}: "
                    f"low_stock {stored[0]} -> {expected[0]}, out_of_stock {stored[1]} -> {expected[1]}"
                ))
                if not dry_run:
                    product.save(update_fields=['is_low_stock', 'is_out_of_stock'])

        if not drifted:
            self.stdout.write(self.style.SUCCESS("✓ All stock flags match quantities"))
        elif dry_run:
            self.stdout.write(self.style.WARNING(f"{len(drifted)} products have drifted flags (dry run, nothing saved)"))
        else:
            self.stdout.write(self.style.SUCCESS(f"Corrected flags on {len(drifted)} products"))
