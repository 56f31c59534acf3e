import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Category',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(help_text='Unique category name', max_length=100, unique=True)),
                ('description', models.CharField(blank=True, help_text='Optional category description', max_length=500, null=True)),
            ],
            options={
                'verbose_name': 'Category',
                'verbose_name_plural': 'Categories',
                'db_table': 'categories',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='Product',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, help_text='Product name for display and search', max_length=200)),
                ('description', models.TextField(blank=True, help_text='Optional product description', null=True)),
                ('price', models.DecimalField(decimal_places=2, help_text='Current product price (must be positive)', max_digits=10)),
                ('stock', models.IntegerField(default=0, help_text='Units in stock')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('category', models.ForeignKey(help_text='Owning category', on_delete=django.db.models.deletion.CASCADE, related_name='products', to='catalog.category')),
            ],
            options={
                'verbose_name': 'Product',
                'verbose_name_plural': 'Products',
                'db_table': 'products',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['price'], name='idx_product_price')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='chk_product_price'),
                    models.CheckConstraint(condition=models.Q(('stock__gte', 0)), name='chk_product_stock'),
                ],
            },
        ),
    ]
