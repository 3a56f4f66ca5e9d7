import django.core.validators
from django.db import migrations, models
import django.db.models.deletion
import uuid


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ('companies', '0001_initial'),
        ('financials', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Employee',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=255)),
                ('cpf', models.CharField(blank=True, max_length=14)),
                ('bank', models.CharField(blank=True, max_length=100)),
                ('agency', models.CharField(blank=True, max_length=20)),
                ('account', models.CharField(blank=True, max_length=30)),
                ('pix_key', models.CharField(blank=True, max_length=140)),
                ('payout_method', models.CharField(blank=True, choices=[('boleto', 'Boleto'), ('pix', 'PIX'), ('deposito', 'Depósito'), ('dinheiro', 'Dinheiro'), ('transferencia', 'Transferência'), ('ted', 'TED'), ('doc', 'DOC'), ('cartao', 'Cartão'), ('outro', 'Outro')], max_length=20)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('recurrence_type', models.CharField(choices=[('avulso', 'Avulso'), ('mensal', 'Mensal'), ('quinzenal', 'Quinzenal'), ('semanal', 'Semanal'), ('personalizado', 'Personalizado')], default='mensal', max_length=20)),
                (
                    'business_day',
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text='N-ésimo dia útil do mês (1ª quinzena).',
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(22),
                        ],
                    ),
                ),
                (
                    'second_day',
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text='Dia do mês da 2ª quinzena.',
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(31),
                        ],
                    ),
                ),
                (
                    'day_of_month',
                    models.PositiveSmallIntegerField(
                        blank=True,
                        help_text='Dia do vencimento mensal.',
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(31),
                        ],
                    ),
                ),
                (
                    'interval_days',
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ('monthly_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ('first_half_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ('second_half_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                (
                    'weekly_amount',
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text='Valor por ocorrência (semanal ou personalizado).',
                        max_digits=15,
                        null=True,
                    ),
                ),
                ('one_off_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=15, null=True)),
                ('one_off_date', models.DateField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_by', models.CharField(blank=True, max_length=150)),
                (
                    'company',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='employees',
                        to='companies.company',
                    ),
                ),
                (
                    'obra',
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='employees',
                        to='companies.obra',
                    ),
                ),
            ],
            options={
                'db_table': 'payroll_employee',
                'ordering': ['company__name', 'name'],
            },
        ),
        migrations.CreateModel(
            name='PayrollEntry',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee_name', models.CharField(max_length=255)),
                ('cpf', models.CharField(blank=True, max_length=14)),
                ('bank', models.CharField(blank=True, max_length=100)),
                ('agency', models.CharField(blank=True, max_length=20)),
                ('account', models.CharField(blank=True, max_length=30)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=15)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=0, max_digits=15)),
                (
                    'status',
                    models.CharField(
                        choices=[('aberto', 'Aberto'), ('parcial', 'Parcial'), ('pago', 'Pago')],
                        default='aberto',
                        max_length=20,
                    ),
                ),
                ('payout_method', models.CharField(blank=True, choices=[('boleto', 'Boleto'), ('pix', 'PIX'), ('deposito', 'Depósito'), ('dinheiro', 'Dinheiro'), ('transferencia', 'Transferência'), ('ted', 'TED'), ('doc', 'DOC'), ('cartao', 'Cartão'), ('outro', 'Outro')], max_length=20)),
                ('category', models.CharField(blank=True, max_length=100)),
                ('recurrence_type', models.CharField(blank=True, choices=[('avulso', 'Avulso'), ('mensal', 'Mensal'), ('quinzenal', 'Quinzenal'), ('semanal', 'Semanal'), ('personalizado', 'Personalizado')], max_length=20)),
                ('interval_days', models.PositiveIntegerField(blank=True, null=True)),
                ('open_ended', models.BooleanField(default=False, help_text='Recorrência por tempo indeterminado.')),
                ('business_day', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('second_day', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('group_id', models.CharField(blank=True, db_index=True, max_length=120)),
                ('recurrence_index', models.PositiveIntegerField(blank=True, null=True)),
                ('recurrence_total', models.PositiveIntegerField(blank=True, null=True)),
                ('reference_date', models.DateField()),
                ('paid_on', models.DateField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                (
                    'migrated',
                    models.BooleanField(
                        default=False,
                        help_text='Já copiado para contas a pagar; não recriar mesmo se a conta for excluída.',
                    ),
                ),
                ('created_by', models.CharField(blank=True, max_length=150)),
                (
                    'bill',
                    models.ForeignKey(
                        blank=True,
                        help_text='Conta a pagar criada a partir deste lançamento.',
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name='+',
                        to='financials.bill',
                    ),
                ),
                (
                    'company',
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name='payroll_entries',
                        to='companies.company',
                    ),
                ),
            ],
            options={
                'db_table': 'payroll_entry',
                'ordering': ['-reference_date', 'employee_name'],
                'constraints': [
                    models.UniqueConstraint(
                        condition=models.Q(('group_id', ''), _negated=True),
                        fields=('company', 'group_id', 'reference_date'),
                        name='uniq_payroll_entry_group_date',
                    )
                ],
            },
        ),
    ]
