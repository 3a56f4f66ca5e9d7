from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    dependencies = [
        ('financials', '0001_initial'),
        ('payroll', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='bill',
            name='employee',
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name='bills',
                to='payroll.employee',
            ),
        ),
        migrations.AddField(
            model_name='bill',
            name='payroll_entry',
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name='bills',
                to='payroll.payrollentry',
            ),
        ),
        migrations.AddConstraint(
            model_name='bill',
            constraint=models.UniqueConstraint(
                condition=models.Q(('employee__isnull', False)),
                fields=('employee', 'due_date'),
                name='uniq_bill_employee_due_date',
            ),
        ),
    ]
