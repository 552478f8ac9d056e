import logging

from django.db import transaction

from apps.audit.services import record_audit
from apps.catalog.models import Product
from apps.common import money
from apps.common.exceptions import STORAGE_ERRORS, NotFoundError, StorageUnavailableError, ValidationError
from apps.customers.models import Customer
from apps.sales.models import PaymentMethod, Sale, SaleItem, SaleStatus

logger = logging.getLogger(__name__)


def _require_int(value, field, minimum):
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError({field: f"{field} deve ser um inteiro."})
    if value < minimum:
        raise ValidationError({field: f"{field} deve ser maior ou igual a {minimum}."})
    return _within_storage(value, field)


def _within_storage(value, field):
    if value > money.MAX_STORED_INT:
        raise ValidationError({field: f"{field} excede o limite de {money.MAX_STORED_INT}."})
    return value


def _normalize_items(items):
    if not items:
        raise ValidationError({"items": "Adicione pelo menos um produto a venda."})

    normalized = []
    for item in items:
        quantity = _require_int(item.get("quantity"), "quantity", 1)
        unit_price = _require_int(item.get("unit_price"), "unit_price", 0)
        total_price = _within_storage(money.multiply(unit_price, quantity), "total_price")
        supplied_total = item.get("total_price")
        if supplied_total is not None and supplied_total != total_price:
            raise ValidationError({"total_price": "O total do item deve ser quantidade x preco unitario."})
        normalized.append(
            {
                "product_id": item.get("product_id"),
                "quantity": quantity,
                "unit_price": unit_price,
                "total_price": total_price,
            }
        )
    return normalized


def _resolve_products(account, items):
    product_ids = {item["product_id"] for item in items}
    products = {product.id: product for product in Product.objects.filter(account=account, id__in=product_ids)}
    missing = product_ids - set(products)
    if missing:
        raise NotFoundError({"product_id": f"Produto(s) nao encontrado(s): {sorted(missing, key=str)}."})
    return products


def record_sale(
    *,
    account,
    customer_id,
    items,
    payment_method,
    installments=1,
    amount_tendered=None,
    total_amount=None,
    change=None,
):
    """Validate a finished checkout and persist the sale with its items.

    The header and every item are written in one transaction; the returned
    ``Sale`` carries the id generated by that write. Validation runs before
    anything touches the database, so a rejected call leaves no rows behind.
    """
    if payment_method not in PaymentMethod.values:
        raise ValidationError({"payment_method": "Forma de pagamento invalida."})

    normalized_items = _normalize_items(items)
    computed_total = _within_storage(
        money.total(*(item["total_price"] for item in normalized_items)), "total_amount"
    )
    if total_amount is not None and total_amount != computed_total:
        raise ValidationError({"total_amount": "totalAmount mismatch"})

    installments = _require_int(installments if installments is not None else 1, "installments", 1)
    if payment_method != PaymentMethod.CARD:
        installments = 1

    amount_received = None
    derived_change = None
    if payment_method == PaymentMethod.CASH:
        if amount_tendered is None:
            raise ValidationError({"amount_received": "Informe o valor recebido em dinheiro."})
        amount_received = _require_int(amount_tendered, "amount_received", 0)
        if amount_received < computed_total:
            raise ValidationError({"amount_received": "O valor recebido e menor que o total da venda."})
        derived_change = amount_received - computed_total
        if change is not None and change != derived_change:
            raise ValidationError({"change": "O troco informado nao confere com o valor recebido."})

    customer = Customer.objects.filter(account=account, id=customer_id).first()
    if customer is None:
        raise NotFoundError({"customer_id": "Cliente nao encontrado."})
    products = _resolve_products(account, normalized_items)

    with transaction.atomic():
        sale = Sale.objects.create(
            account=account,
            customer=customer,
            total_amount=computed_total,
            payment_method=payment_method,
            installments=installments,
            amount_received=amount_received,
            change=derived_change,
            status=SaleStatus.COMPLETED,
        )
        SaleItem.objects.bulk_create(
            [
                SaleItem(
                    sale=sale,
                    product_id=item["product_id"],
                    product_name=products[item["product_id"]].name,
                    quantity=item["quantity"],
                    unit_price=item["unit_price"],
                    total_price=item["total_price"],
                )
                for item in normalized_items
            ]
        )
        record_audit(
            actor=account,
            action="sale.create",
            entity_type="sale",
            entity_id=sale.id,
            payload={
                "customer_id": customer.id,
                "total_amount": computed_total,
                "payment_method": payment_method,
                "items": len(normalized_items),
            },
        )

    logger.info(
        "Recorded sale %s for account %s: total=%s method=%s items=%s",
        sale.id,
        account.pk,
        money.to_major(computed_total),
        payment_method,
        len(normalized_items),
    )
    return sale


def sales_for_account(account):
    return Sale.objects.filter(account=account).select_related("customer").order_by("-created_at", "-id")


def list_sales(account):
    """Most recent first; a storage outage yields an empty list instead of an error."""
    try:
        return list(sales_for_account(account))
    except STORAGE_ERRORS as exc:
        logger.warning("Sales history unavailable for account %s: %s", account.pk, exc)
        return []


def get_sale_detail(account, sale_id):
    try:
        sale = sales_for_account(account).prefetch_related("items").filter(pk=sale_id).first()
    except STORAGE_ERRORS as exc:
        logger.error("Could not load sale %s: %s", sale_id, exc)
        raise StorageUnavailableError()
    except (TypeError, ValueError):
        sale = None
    if sale is None:
        raise NotFoundError({"id": "Venda nao encontrada."})
    return sale


def resolve_customer(sale):
    """The sale's customer, or ``None`` when the reference no longer resolves."""
    try:
        return sale.customer
    except Customer.DoesNotExist:
        return None
