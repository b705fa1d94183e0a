from rest_framework import serializers


class BaseModelSerializer(serializers.ModelSerializer):
    """
    Base serializer for the POS models.

    Views read ``select_related_fields`` / ``prefetch_related_fields`` from
    Meta to optimize their querysets.
    """

    class Meta:
        select_related_fields = []
        prefetch_related_fields = []


class TimestampedSerializer(BaseModelSerializer):
    """Models with created_at/updated_at; both are read-only."""

    created_at = serializers.DateTimeField(read_only=True)
    updated_at = serializers.DateTimeField(read_only=True)


class NameEnrichmentMixin:
    """
    Adds human-readable names to a serialized entity.

    Subclasses list ``name_lookups`` as ``(output_field, id_attribute, lookup)``
    tuples where ``lookup`` is a ``NameLookupService`` method name. Names that
    cannot be resolved are left out of the payload instead of failing it.

    Usage:
        class BillSerializer(NameEnrichmentMixin, BaseModelSerializer):
            name_lookups = [("table_name", "table_no", "table_name")]
    """

    name_lookups = []

    def to_representation(self, instance):
        data = super().to_representation(instance)

        from masters.services import NameLookupService

        for output_field, id_attribute, lookup in self.name_lookups:
            entity_id = getattr(instance, id_attribute, None)
            if entity_id is None:
                continue
            name = getattr(NameLookupService, lookup)(entity_id)
            if name is not None:
                data[output_field] = name
        return data
