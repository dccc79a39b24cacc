from rest_framework import serializers

from lims_core.doctors.models import Doctor


class DoctorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Doctor
        fields = ["id", "name", "phone", "clinic_name", "commission_percentage", "is_active", "created_at"]
        read_only_fields = ["id", "created_at"]
