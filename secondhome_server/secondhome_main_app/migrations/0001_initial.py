# Initial schema for listings, bookings, payments, moderation and support

from django.conf import settings
import django.core.validators
from django.db import migrations, models
import django.db.models.deletion


MODERATION_FIELDS = [
    ('is_approved', models.BooleanField(default=False)),
    ('is_rejected', models.BooleanField(default=False)),
    ('approved_at', models.DateTimeField(blank=True, null=True)),
    ('rejected_at', models.DateTimeField(blank=True, null=True)),
    ('rejection_reason', models.TextField(blank=True, default='')),
    ('ai_review', models.JSONField(blank=True, null=True)),
]


def moderation_fields():
    return [(name, field.clone()) for name, field in MODERATION_FIELDS] + [
        ('approved_by', models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name='+', to=settings.AUTH_USER_MODEL,
        )),
        ('rejected_by', models.ForeignKey(
            blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
            related_name='+', to=settings.AUTH_USER_MODEL,
        )),
    ]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='OTP',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('email', models.EmailField(blank=True, db_index=True, max_length=254, null=True)),
                ('phone', models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                ('code', models.CharField(max_length=6)),
                ('purpose', models.CharField(
                    choices=[
                        ('registration', 'Registration'),
                        ('login', 'Login'),
                        ('password-reset', 'Password Reset'),
                        ('phone-verification', 'Phone Verification'),
                    ],
                    max_length=20,
                )),
                ('expires_at', models.DateTimeField()),
                ('verified_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['email', 'purpose'], name='otp_email_purpose_idx'),
                    models.Index(fields=['phone', 'purpose'], name='otp_phone_purpose_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='OTPAttempt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('identifier', models.CharField(db_index=True, max_length=254, unique=True)),
                ('attempt_count', models.IntegerField(default=0)),
                ('last_attempt', models.DateTimeField(auto_now=True)),
                ('blocked_until', models.DateTimeField(blank=True, null=True)),
            ],
        ),
        migrations.CreateModel(
            name='Property',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *moderation_fields(),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('property_type', models.CharField(choices=[('PG', 'PG'), ('Flat', 'Flat')], default='PG', max_length=10)),
                ('gender', models.CharField(
                    choices=[('male', 'Male'), ('female', 'Female'), ('unisex', 'Unisex')],
                    default='unisex', max_length=10,
                )),
                ('price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('security_deposit', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('address', models.CharField(blank=True, default='', max_length=255)),
                ('location', models.CharField(blank=True, default='', max_length=150)),
                ('city', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('state', models.CharField(blank=True, default='', max_length=100)),
                ('pincode', models.CharField(blank=True, default='', max_length=6)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('amenities', models.JSONField(blank=True, default=list)),
                ('images', models.JSONField(blank=True, default=list)),
                ('rating', models.DecimalField(decimal_places=2, default=0, max_digits=3)),
                ('reviews_count', models.IntegerField(default=0)),
                ('views_count', models.IntegerField(default=0)),
                ('verification_status', models.CharField(
                    choices=[('pending', 'Pending'), ('verified', 'Verified')], default='pending', max_length=10,
                )),
                ('nearby_colleges', models.JSONField(blank=True, default=list)),
                ('nearby_places', models.JSONField(blank=True, default=list)),
                ('distance', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='properties', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name_plural': 'properties',
                'indexes': [
                    models.Index(fields=['is_approved', 'is_rejected'], name='property_moderation_idx'),
                    models.Index(fields=['owner', '-created_at'], name='property_owner_created_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Profile',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(blank=True, default='', max_length=100)),
                ('phone', models.CharField(blank=True, db_index=True, max_length=20, null=True)),
                ('phone_verified', models.BooleanField(default=False)),
                ('role', models.CharField(
                    choices=[('user', 'Student'), ('owner', 'Property Owner'), ('admin', 'Admin')],
                    default='user', max_length=10,
                )),
                ('email_verified_at', models.DateTimeField(blank=True, null=True)),
                ('account_holder_name', models.CharField(blank=True, default='', max_length=100)),
                ('account_number', models.CharField(blank=True, default='', max_length=30)),
                ('ifsc_code', models.CharField(blank=True, default='', max_length=11)),
                ('bank_name', models.CharField(blank=True, default='', max_length=100)),
                ('upi_id', models.CharField(blank=True, default='', max_length=100)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, to=settings.AUTH_USER_MODEL)),
                ('favorites', models.ManyToManyField(
                    blank=True, related_name='favorited_by', to='secondhome_main_app.property',
                )),
            ],
        ),
        migrations.CreateModel(
            name='Mess',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                *moderation_fields(),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True, default='')),
                ('address', models.CharField(blank=True, default='', max_length=255)),
                ('location', models.CharField(blank=True, default='', max_length=150)),
                ('city', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('state', models.CharField(blank=True, default='', max_length=100)),
                ('pincode', models.CharField(blank=True, default='', max_length=6)),
                ('latitude', models.FloatField(blank=True, null=True)),
                ('longitude', models.FloatField(blank=True, null=True)),
                ('monthly_price', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('daily_price', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('trial_days', models.IntegerField(default=0)),
                ('home_delivery_available', models.BooleanField(default=False)),
                ('delivery_radius_km', models.FloatField(blank=True, null=True)),
                ('delivery_charges', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('packaging_available', models.BooleanField(default=False)),
                ('packaging_price', models.DecimalField(decimal_places=2, default=0, max_digits=8)),
                ('images', models.JSONField(blank=True, default=list)),
                ('meal_types', models.JSONField(blank=True, default=list)),
                ('cuisine_types', models.JSONField(blank=True, default=list)),
                ('diet_types', models.JSONField(blank=True, default=list)),
                ('menu', models.JSONField(blank=True, default=dict)),
                ('opening_hours', models.JSONField(blank=True, default=dict)),
                ('amenities', models.JSONField(blank=True, default=list)),
                ('capacity', models.IntegerField(blank=True, null=True)),
                ('contact_name', models.CharField(blank=True, default='', max_length=100)),
                ('contact_phone', models.CharField(blank=True, default='', max_length=20)),
                ('contact_email', models.EmailField(blank=True, default='', max_length=254)),
                ('rating', models.DecimalField(decimal_places=2, default=0, max_digits=3)),
                ('reviews_count', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='messes', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name_plural': 'messes',
            },
        ),
        migrations.CreateModel(
            name='MessSubscription',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('start_date', models.DateField()),
                ('end_date', models.DateField()),
                ('monthly_price', models.DecimalField(decimal_places=2, max_digits=10)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('active', 'Active'),
                        ('cancelled', 'Cancelled'),
                        ('expired', 'Expired'),
                    ],
                    default='pending', max_length=10,
                )),
                ('subscriber_name', models.CharField(blank=True, default='', max_length=100)),
                ('subscriber_email', models.EmailField(blank=True, default='', max_length=254)),
                ('subscriber_phone', models.CharField(blank=True, default='', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('mess', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='subscriptions', to='secondhome_main_app.mess',
                )),
                ('owner', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='mess_subscribers', to=settings.AUTH_USER_MODEL,
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='mess_subscriptions', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'indexes': [models.Index(fields=['user', '-created_at'], name='messsub_user_created_idx')],
            },
        ),
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('move_in_date', models.DateField()),
                ('duration_months', models.PositiveIntegerField(default=1)),
                ('monthly_rent', models.DecimalField(decimal_places=2, max_digits=10)),
                ('security_deposit', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('total_amount', models.DecimalField(decimal_places=2, max_digits=12)),
                ('status', models.CharField(
                    choices=[
                        ('pending', 'Pending'),
                        ('confirmed', 'Confirmed'),
                        ('cancelled', 'Cancelled'),
                        ('completed', 'Completed'),
                    ],
                    default='pending', max_length=20,
                )),
                ('payment_status', models.CharField(
                    choices=[('pending', 'Pending'), ('paid', 'Paid'), ('failed', 'Failed'), ('refunded', 'Refunded')],
                    default='pending', max_length=20,
                )),
                ('payment_method', models.CharField(
                    choices=[('upi', 'UPI'), ('razorpay', 'Razorpay'), ('cash', 'Cash')], default='upi', max_length=20,
                )),
                ('payment_id', models.CharField(blank=True, db_index=True, default='', max_length=100)),
                ('payment_details', models.JSONField(blank=True, default=dict)),
                ('contact_name', models.CharField(blank=True, default='', max_length=100)),
                ('contact_phone', models.CharField(blank=True, default='', max_length=20)),
                ('contact_email', models.EmailField(blank=True, default='', max_length=254)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('property', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='secondhome_main_app.property',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='bookings', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='booking_user_created_idx'),
                    models.Index(fields=['property', 'status'], name='booking_property_status_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='VisitRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('phone', models.CharField(max_length=20)),
                ('email', models.EmailField(max_length=254)),
                ('visit_date', models.DateField()),
                ('visit_time', models.CharField(max_length=20)),
                ('notes', models.TextField(blank=True, default='')),
                ('status', models.CharField(
                    choices=[('requested', 'Requested'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled')],
                    default='requested', max_length=20,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('property', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='visit_requests', to='secondhome_main_app.property',
                )),
                ('user', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
        migrations.CreateModel(
            name='Review',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('rating', models.IntegerField(validators=[
                    django.core.validators.MinValueValidator(1),
                    django.core.validators.MaxValueValidator(5),
                ])),
                ('comment', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('property', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to='secondhome_main_app.property',
                )),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='reviews', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'ordering': ['-created_at'],
                'unique_together': {('user', 'property')},
            },
        ),
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(
                    choices=[
                        ('booking', 'Booking'),
                        ('property', 'Property'),
                        ('offer', 'Offer'),
                        ('review', 'Review'),
                        ('system', 'System'),
                        ('payment', 'Payment'),
                        ('message', 'Message'),
                        ('profile', 'Profile'),
                        ('article', 'Article'),
                        ('listing', 'Listing'),
                    ],
                    default='system', max_length=20,
                )),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('link', models.CharField(blank=True, default='', max_length=255)),
                ('image', models.CharField(blank=True, default='', max_length=500)),
                ('priority', models.CharField(
                    choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')], default='medium', max_length=10,
                )),
                ('read', models.BooleanField(default=False)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['user', 'read', '-created_at'], name='notification_user_read_idx')],
            },
        ),
        migrations.CreateModel(
            name='Conversation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=100)),
                ('email', models.EmailField(max_length=254)),
                ('phone', models.CharField(blank=True, default='', max_length=20)),
                ('user_token', models.CharField(db_index=True, max_length=64, unique=True)),
                ('status', models.CharField(
                    choices=[('waiting', 'Waiting'), ('connected', 'Connected'), ('closed', 'Closed')],
                    default='waiting', max_length=10,
                )),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('agent', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='agent_conversations', to=settings.AUTH_USER_MODEL,
                )),
                ('user', models.ForeignKey(
                    blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL,
                    related_name='conversations', to=settings.AUTH_USER_MODEL,
                )),
            ],
        ),
        migrations.CreateModel(
            name='ConversationMessage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sender', models.CharField(
                    choices=[('user', 'User'), ('agent', 'Agent'), ('bot', 'Assistant'), ('system', 'System')],
                    max_length=10,
                )),
                ('content', models.TextField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('conversation', models.ForeignKey(
                    on_delete=django.db.models.deletion.CASCADE, related_name='messages', to='secondhome_main_app.conversation',
                )),
            ],
            options={
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
