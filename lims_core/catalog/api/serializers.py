from rest_framework import serializers

from lims_core.catalog.models import TestDefinition


class TestDefinitionSerializer(serializers.ModelSerializer):
    class Meta:
        model = TestDefinition
        fields = [
            "id",
            "short_code",
            "test_name",
            "department",
            "unit",
            "min_range",
            "max_range",
            "price",
            "is_active",
        ]
        read_only_fields = fields
