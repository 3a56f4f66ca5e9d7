from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('payroll', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='employee',
            name='last_recurrence_index',
            field=models.PositiveIntegerField(default=0, editable=False, help_text='Maior número de recorrência já usado; não volta atrás quando contas são excluídas.'),
        ),
    ]
