from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ('companies', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Bill',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                (
                    'type',
                    models.CharField(
                        choices=[
                            ('boleto', 'Boleto'),
                            ('folha', 'Folha de Pagamento'),
                            ('empreiteiro', 'Empreiteiro'),
                            ('escritorio', 'Escritório'),
                            ('particular', 'Particular'),
                            ('outro', 'Outro'),
                        ],
                        default='outro',
                        max_length=20,
                    ),
                ),
                ('description', models.CharField(blank=True, max_length=255)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15)),
                ('due_date', models.DateField()),
                ('paid_on', models.DateField(blank=True, null=True)),
                (
                    'status',
                    models.CharField(
                        choices=[('pendente', 'Pendente'), ('pago', 'Pago'), ('vencido', 'Vencido')],
                        default='pendente',
                        max_length=20,
                    ),
                ),
                ('payee', models.CharField(blank=True, max_length=255)),
                ('bank', models.CharField(blank=True, max_length=100)),
                ('agency', models.CharField(blank=True, max_length=20)),
                ('account', models.CharField(blank=True, max_length=30)),
                ('pix_key', models.CharField(blank=True, max_length=140)),
                (
                    'payout_method',
                    models.CharField(
                        blank=True,
                        choices=[('boleto', 'Boleto'), ('pix', 'PIX'), ('deposito', 'Depósito'), ('dinheiro', 'Dinheiro'), ('transferencia', 'Transferência'), ('ted', 'TED'), ('doc', 'DOC'), ('cartao', 'Cartão'), ('outro', 'Outro')],
                        max_length=20,
                    ),
                ),
                ('recurrence_group_id', models.CharField(blank=True, db_index=True, max_length=120)),
                ('recurrence_index', models.PositiveIntegerField(blank=True, null=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
                (
                    'company',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='bills',
                        to='companies.company',
                    ),
                ),
                (
                    'obra',
                    models.ForeignKey(
                        blank=True,
                        help_text='Centro de custo. Vazio quando a conta não pertence a nenhuma obra.',
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='bills',
                        to='companies.obra',
                    ),
                ),
            ],
            options={
                'db_table': 'bill',
                'ordering': ['due_date', 'created_at'],
            },
        ),
    ]
