import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import shops.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Shop',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('activity', models.CharField(max_length=100)),
                ('city', models.CharField(max_length=100)),
                ('slug', models.SlugField(unique=True)),
                ('theme', models.CharField(choices=[('elegant', 'Élégant'), ('warm', 'Chaleureux'), ('nature', 'Nature'), ('luxury', 'Luxe'), ('modern', 'Moderne'), ('ocean', 'Océan')], default='elegant', max_length=20)),
                ('photo', models.ImageField(blank=True, upload_to=shops.models.shop_photo_path)),
                ('description', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='shop', to=settings.AUTH_USER_MODEL)),
            ],
        ),
    ]
