# Generated manually for Product and InventoryMovement models

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField(blank=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=12)),
                ('image', models.URLField(max_length=500)),
                ('category', models.CharField(choices=[('product', 'Product'), ('fabric', 'Fabric')], db_index=True, default='product', max_length=20)),
                ('quantity', models.IntegerField(default=0)),
                ('color', models.CharField(blank=True, max_length=100)),
                ('fabric_type', models.CharField(blank=True, max_length=100)),
                ('featured', models.BooleanField(default=False)),
                ('low_stock_threshold', models.IntegerField(default=10)),
                ('reorder_point', models.IntegerField(default=5)),
                ('is_low_stock', models.BooleanField(db_index=True, default=False)),
                ('is_out_of_stock', models.BooleanField(db_index=True, default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'products',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['category', 'price'], name='idx_product_category_price')],
            },
        ),
        migrations.CreateModel(
            name='InventoryMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('movement_type', models.CharField(choices=[('order', 'Order'), ('restock', 'Restock'), ('adjustment', 'Adjustment'), ('return', 'Return')], max_length=20)),
                ('quantity', models.IntegerField()),
                ('reference', models.CharField(max_length=255)),
                ('reference_id', models.CharField(blank=True, max_length=100)),
                ('notes', models.TextField(blank=True)),
                ('previous_quantity', models.IntegerField()),
                ('new_quantity', models.IntegerField()),
                ('date', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('product', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='movements', to='catalog.product')),
            ],
            options={
                'db_table': 'inventory_movements',
                'ordering': ['-date', '-id'],
            },
        ),
    ]
