import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('bookings', '0001_initial'),
        ('customers', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('amount', models.PositiveIntegerField()),
                ('payment_for_date', models.DateField(help_text='Month being billed (stored as YYYY-MM-01)')),
                ('due_date', models.DateField(blank=True, help_text='Day 7 of the billed month; derived when left empty')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('notified', 'Notified'), ('completed', 'Completed'), ('failed', 'Failed')], db_index=True, default='notified', max_length=12)),
                ('booking_snapshot', models.JSONField(blank=True, default=dict)),
                ('reminder_sent_at', models.DateTimeField(blank=True, null=True)),
                ('late_warned_at', models.DateTimeField(blank=True, null=True)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('booking', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='bookings.booking')),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='payments', to='customers.customer')),
            ],
            options={
                'ordering': ['-payment_for_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['customer', '-created_at'], name='idx_payment_customer_created'),
                    models.Index(fields=['booking', 'payment_for_date'], name='idx_payment_booking_month'),
                    models.Index(fields=['status', 'due_date'], name='idx_payment_status_due'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('customer', 'booking', 'payment_for_date'), name='uniq_payment_customer_booking_month'),
                ],
            },
        ),
        migrations.CreateModel(
            name='PaymentConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('deleted_at', models.DateTimeField(blank=True, null=True)),
                ('is_enabled', models.BooleanField(default=True)),
                ('start_date', models.DateField(blank=True, help_text='Do not bill before this date', null=True)),
                ('last_run_at', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('excluded_customers', models.ManyToManyField(blank=True, help_text='Customers skipped by the rent job', related_name='+', to='customers.customer')),
            ],
            options={
                'verbose_name': 'Payment configuration',
                'ordering': ['-created_at', '-id'],
            },
        ),
    ]
