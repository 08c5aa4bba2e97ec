import logging

from django.db import transaction
from django.db.models import Q, F
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny

from garment.core.permissions import IsProductManager
from garment.core.utils import success_response, error_response, create_audit_log
from .filters import ProductFilter
from .models import Product, InventoryMovement
from .serializers import (
    ProductSerializer, InventoryMovementSerializer,
    RestockSerializer, AdjustInventorySerializer,
)

logger = logging.getLogger('garment.catalog')


def _get_product(pk, lock=False):
    queryset = Product.objects.select_for_update() if lock else Product.objects
    return get_object_or_404(queryset, pk=pk)


@api_view(['GET', 'POST'])
@permission_classes([AllowAny])
def product_list_create(request):
    """List products with storefront filters, or create one (product managers only)"""
    if request.method == 'GET':
        product_filter = ProductFilter(request.query_params, queryset=Product.objects.all())
        products = product_filter.qs
        serializer = ProductSerializer(products, many=True)
        return success_response(count=len(serializer.data), data=serializer.data)

    if not (request.user.is_authenticated and IsProductManager().has_permission(request, None)):
        return _permission_denied(request)

    serializer = ProductSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    product = serializer.save()
    logger.info(f"Product created: {product.id} {product.name}")
    create_audit_log(request, 'create', 'Product', product.id, object_name=product.name)
    return success_response(status.HTTP_201_CREATED, data=ProductSerializer(product).data)


def _permission_denied(request):
    if not request.user.is_authenticated:
        return error_response('Access denied. Please log in.', status.HTTP_401_UNAUTHORIZED)
    return error_response('Access denied. Insufficient privileges.', status.HTTP_403_FORBIDDEN)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([AllowAny])
def product_detail(request, pk):
    """Retrieve a product (public), update or delete it (product managers only)"""
    if request.method != 'GET' and not (
        request.user.is_authenticated and IsProductManager().has_permission(request, None)
    ):
        return _permission_denied(request)

    product = Product.objects.filter(pk=pk).first()
    if product is None:
        return error_response('Product not found', status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        return success_response(data=ProductSerializer(product).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        create_audit_log(request, 'update', 'Product', product.id, changes=dict(request.data), object_name=product.name)
        return success_response(data=serializer.data)
    else:  # DELETE
        product_name = product.name
        product.delete()
        logger.info(f"Product deleted: {pk} {product_name}")
        create_audit_log(request, 'delete', 'Product', pk, object_name=product_name)
        return success_response(message='Product deleted')


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductManager])
def product_inventory_history(request, pk):
    """Movement history for a product, newest first"""
    product = get_object_or_404(Product, pk=pk)
    movements = InventoryMovement.objects.filter(product=product).order_by('-date', '-id')
    return success_response(
        product_name=product.name,
        current_quantity=product.quantity,
        inventory_history=InventoryMovementSerializer(movements, many=True).data,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsProductManager])
def product_restock(request, pk):
    serializer = RestockSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    quantity = serializer.validated_data['quantity']

    with transaction.atomic():
        product = _get_product(pk, lock=True)
        product.track_inventory_change(
            InventoryMovement.TYPE_RESTOCK,
            quantity,
            'Inventory Restock',
            notes=serializer.validated_data['notes'] or f'Manual restock by {request.user.email}',
        )

    create_audit_log(request, 'stock_restock', 'Product', product.id,
                     changes={'quantity': quantity}, object_name=product.name)
    return success_response(
        message=f'Successfully added {quantity} items to inventory',
        new_quantity=product.quantity,
        product=ProductSerializer(product).data,
    )


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsProductManager])
def product_adjust_inventory(request, pk):
    serializer = AdjustInventorySerializer(data=request.data)
    serializer.is_valid(raise_exception=True)
    adjustment = serializer.validated_data['adjustment']

    with transaction.atomic():
        product = _get_product(pk, lock=True)
        if product.quantity + adjustment < 0:
            return error_response('Adjustment would result in negative inventory')
        product.track_inventory_change(
            InventoryMovement.TYPE_ADJUSTMENT,
            adjustment,
            'Inventory Adjustment',
            notes=serializer.validated_data['reason'],
        )

    create_audit_log(request, 'stock_adjust', 'Product', product.id,
                     changes={'adjustment': adjustment, 'reason': serializer.validated_data['reason']},
                     object_name=product.name)
    return success_response(
        message=f'Successfully adjusted inventory by {adjustment} items',
        new_quantity=product.quantity,
        product=ProductSerializer(product).data,
    )


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsProductManager])
def product_low_stock(request):
    """Products that are out of stock or at/below their low-stock threshold"""
    products = Product.objects.filter(
        Q(quantity__lte=0) | Q(quantity__lte=F('low_stock_threshold'))
    ).order_by('quantity', 'id')
    out_of_stock = [product for product in products if product.quantity <= 0]
    low_stock = [product for product in products if product.quantity > 0]
    return success_response(
        count=len(products),
        out_of_stock_count=len(out_of_stock),
        low_stock_count=len(low_stock),
        data=ProductSerializer(products, many=True).data,
    )
