from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("checkout", "0001_initial"),
    ]

    operations = [
        migrations.AddField(
            model_name="payment",
            name="attempts",
            field=models.PositiveIntegerField(default=1),
        ),
    ]
