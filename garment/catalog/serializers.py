from rest_framework import serializers
from .models import Product, InventoryMovement


class ProductSerializer(serializers.ModelSerializer):
    category_display = serializers.CharField(source='get_category_display', read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'description', 'price', 'image', 'category', 'category_display',
                  'quantity', 'color', 'fabric_type', 'featured', 'low_stock_threshold',
                  'reorder_point', 'is_low_stock', 'is_out_of_stock', 'created_at', 'updated_at']
        read_only_fields = ['is_low_stock', 'is_out_of_stock', 'created_at', 'updated_at']
        extra_kwargs = {
            'quantity': {'required': True},
            'price': {'min_value': 0},
        }

    def validate(self, attrs):
        category = attrs.get('category', getattr(self.instance, 'category', Product.CATEGORY_PRODUCT))
        if category == Product.CATEGORY_FABRIC:
            color = attrs.get('color', getattr(self.instance, 'color', ''))
            fabric_type = attrs.get('fabric_type', getattr(self.instance, 'fabric_type', ''))
            if not color or not fabric_type:
                raise serializers.ValidationError('Color and fabric type are required for fabrics')
        return attrs


class InventoryMovementSerializer(serializers.ModelSerializer):
    movement_type_display = serializers.CharField(source='get_movement_type_display', read_only=True)

    class Meta:
        model = InventoryMovement
        fields = ['id', 'product', 'movement_type', 'movement_type_display', 'quantity', 'reference',
                  'reference_id', 'notes', 'previous_quantity', 'new_quantity', 'date']


class RestockSerializer(serializers.Serializer):
    quantity = serializers.IntegerField(min_value=1, error_messages={
        'min_value': 'Please provide a valid quantity greater than zero',
        'invalid': 'Please provide a valid quantity greater than zero',
        'required': 'Please provide a valid quantity greater than zero',
    })
    notes = serializers.CharField(required=False, allow_blank=True, default='')


class AdjustInventorySerializer(serializers.Serializer):
    adjustment = serializers.IntegerField(error_messages={
        'invalid': 'Please provide a valid adjustment value (positive or negative)',
        'required': 'Please provide a valid adjustment value (positive or negative)',
    })
    reason = serializers.CharField(trim_whitespace=True, error_messages={
        'blank': 'Please provide a reason for the adjustment',
        'required': 'Please provide a reason for the adjustment',
    })

    def validate_adjustment(self, value):
        if value == 0:
            raise serializers.ValidationError('Please provide a valid adjustment value (positive or negative)')
        return value
