from django.contrib import admin
from django.utils.html import format_html
from .models import Order, OrderItem


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ['product', 'name', 'quantity', 'price', 'category', 'fabric_measurement', 'image']
    can_delete = False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'full_name', 'user', 'total_price', 'payment_method', 'status_badge',
                    'is_paid', 'is_delivered', 'created_at']
    list_filter = ['order_status', 'is_paid', 'is_delivered', 'payment_method', 'created_at']
    search_fields = ['full_name', 'address', 'user__email', 'user__name']
    ordering = ['-created_at']
    readonly_fields = ['paid_at', 'delivered_at', 'created_at', 'updated_at']
    inlines = [OrderItemInline]

    @admin.display(description='Status', ordering='order_status')
    def status_badge(self, obj):
        badge = obj.badge
        return format_html('<span class="{}" data-icon="{}">{}</span>', badge.color_class, badge.icon, obj.order_status)
