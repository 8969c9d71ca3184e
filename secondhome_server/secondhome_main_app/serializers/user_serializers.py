"""User-related serializers"""
from django.contrib.auth.models import User
from rest_framework import serializers

from ..models import Profile
from ..utils.validators import normalize_phone, is_valid_phone


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ['id', 'email']


class ProfileSerializer(serializers.ModelSerializer):
    email = serializers.EmailField(source='user.email', read_only=True)
    has_password = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = ['id', 'email', 'name', 'phone', 'phone_verified', 'role', 'has_password', 'email_verified_at', 'created_at']
        read_only_fields = ['phone_verified', 'role', 'email_verified_at', 'created_at']

    def get_has_password(self, obj):
        return obj.user.has_usable_password()

    def validate_name(self, value):
        if value and len(value.strip()) < 2:
            raise serializers.ValidationError('Name must be at least 2 characters')
        return value.strip()

    def validate_phone(self, value):
        if not value:
            return value
        phone = normalize_phone(value)
        if not is_valid_phone(phone):
            raise serializers.ValidationError('Invalid phone number format')
        return phone

    def update(self, instance, validated_data):
        # A changed phone number has to be verified again
        if 'phone' in validated_data and validated_data['phone'] != instance.phone:
            instance.phone_verified = False
        return super().update(instance, validated_data)


class BankAccountSerializer(serializers.ModelSerializer):
    class Meta:
        model = Profile
        fields = ['account_holder_name', 'account_number', 'ifsc_code', 'bank_name', 'upi_id']

    def validate_ifsc_code(self, value):
        value = (value or '').upper()
        if value and (len(value) != 11 or not value[:4].isalpha() or value[4] != '0'):
            raise serializers.ValidationError('Invalid IFSC code')
        return value

    def validate_account_number(self, value):
        if value and not (value.isdigit() and 9 <= len(value) <= 18):
            raise serializers.ValidationError('Account number must be 9 to 18 digits')
        return value

    def validate(self, data):
        has_bank = data.get('account_number') or data.get('ifsc_code')
        if has_bank and not (data.get('account_number') and data.get('ifsc_code') and data.get('account_holder_name')):
            raise serializers.ValidationError('Account holder name, account number and IFSC are required together')
        return data
