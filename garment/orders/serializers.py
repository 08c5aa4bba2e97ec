from rest_framework import serializers

from garment.catalog.models import Product
from .models import Order, OrderItem
from .status import status_badge, status_step, available_actions


class ShippingAddressSerializer(serializers.Serializer):
    full_name = serializers.CharField(max_length=150)
    address = serializers.CharField(max_length=255)
    city = serializers.CharField(max_length=100)
    postal_code = serializers.CharField(max_length=20)
    country = serializers.CharField(max_length=100)
    phone_number = serializers.CharField(max_length=30)


class OrderItemSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(read_only=True)

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'name', 'quantity', 'price', 'category', 'fabric_measurement', 'image']


class OrderItemInputSerializer(serializers.Serializer):
    """Line item as submitted at checkout; stock is checked by the order service"""
    product = serializers.IntegerField()
    name = serializers.CharField(max_length=200)
    quantity = serializers.IntegerField(min_value=1)
    price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    category = serializers.ChoiceField(choices=Product.CATEGORY_CHOICES, default=Product.CATEGORY_PRODUCT)
    fabric_measurement = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True)
    image = serializers.URLField(max_length=500)

    def validate(self, attrs):
        if attrs['category'] == Product.CATEGORY_FABRIC and attrs.get('fabric_measurement') is None:
            raise serializers.ValidationError('Fabric measurement is required for fabric items')
        return attrs


class OrderCreateSerializer(serializers.Serializer):
    order_items = OrderItemInputSerializer(many=True, required=False)
    shipping_address = ShippingAddressSerializer()
    payment_method = serializers.ChoiceField(choices=Order.PAYMENT_METHOD_CHOICES)
    items_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    tax_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    shipping_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0, default=0)


class OrderSerializer(serializers.ModelSerializer):
    user = serializers.SerializerMethodField()
    shipping_address = serializers.SerializerMethodField()
    payment_result = serializers.SerializerMethodField()
    order_items = OrderItemSerializer(source='items', many=True, read_only=True)
    status_color = serializers.SerializerMethodField()
    status_icon = serializers.SerializerMethodField()
    status_step = serializers.SerializerMethodField()
    actions = serializers.SerializerMethodField()

    class Meta:
        model = Order
        fields = ['id', 'user', 'order_items', 'shipping_address', 'payment_method', 'payment_result',
                  'items_price', 'tax_price', 'shipping_price', 'total_price', 'is_paid', 'paid_at',
                  'is_delivered', 'delivered_at', 'order_status', 'status_color', 'status_icon',
                  'status_step', 'actions', 'created_at', 'updated_at']

    def get_user(self, obj):
        return {'id': obj.user_id, 'name': obj.user.name, 'email': obj.user.email}

    def get_shipping_address(self, obj):
        return {
            'full_name': obj.full_name,
            'address': obj.address,
            'city': obj.city,
            'postal_code': obj.postal_code,
            'country': obj.country,
            'phone_number': obj.phone_number,
        }

    def get_payment_result(self, obj):
        if not obj.payment_id and not obj.payment_status:
            return None
        return {
            'id': obj.payment_id,
            'status': obj.payment_status,
            'update_time': obj.payment_update_time,
            'email_address': obj.payment_email,
        }

    def get_status_color(self, obj):
        return status_badge(obj.order_status).color_class

    def get_status_icon(self, obj):
        return status_badge(obj.order_status).icon

    def get_status_step(self, obj):
        return status_step(obj.order_status)

    def get_actions(self, obj):
        return available_actions(obj.order_status)


class OrderStatusUpdateSerializer(serializers.Serializer):
    status = serializers.CharField(required=False, allow_blank=True, default='')


class PaymentResultSerializer(serializers.Serializer):
    id = serializers.CharField(required=False, allow_blank=True, default='')
    status = serializers.CharField(required=False, allow_blank=True, default='')
    update_time = serializers.CharField(required=False, allow_blank=True, default='')
    email_address = serializers.EmailField(required=False, allow_blank=True, default='')

    def to_internal_value(self, data):
        # Payment gateways nest the payer's email under ``payer``
        payer = data.get('payer') if hasattr(data, 'get') else None
        if isinstance(payer, dict) and 'email_address' not in data:
            data = {**data, 'email_address': payer.get('email_address', '')}
        return super().to_internal_value(data)
