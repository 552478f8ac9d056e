from dataclasses import dataclass

from apps.common import money


@dataclass
class CartLine:
    product_id: int
    name: str
    unit_price: int
    quantity: int = 1

    @property
    def total_price(self):
        return money.multiply(self.unit_price, self.quantity)


class Cart:
    """Products picked for one checkout, keyed by product id in insertion order.

    The unit price is captured when the product is first added; later catalog
    edits do not touch lines already in the cart.
    """

    def __init__(self):
        self._lines = {}

    def __iter__(self):
        return iter(self._lines.values())

    def __len__(self):
        return len(self._lines)

    def __contains__(self, product_id):
        return product_id in self._lines

    @property
    def is_empty(self):
        return not self._lines

    def get(self, product_id):
        return self._lines.get(product_id)

    def add_item(self, product):
        line = self._lines.get(product.id)
        if line:
            line.quantity += 1
            return line
        line = CartLine(product_id=product.id, name=product.name, unit_price=product.price)
        self._lines[product.id] = line
        return line

    def set_quantity(self, product_id, quantity):
        if quantity <= 0:
            self.remove_item(product_id)
            return None
        line = self._lines.get(product_id)
        if line:
            line.quantity = quantity
        return line

    def remove_item(self, product_id):
        self._lines.pop(product_id, None)

    def clear(self):
        self._lines.clear()

    def total(self):
        return money.total(*(line.total_price for line in self._lines.values()))

    def change_for(self, amount_received):
        return money.total(amount_received, -self.total())

    def as_sale_items(self):
        return [
            {
                "product_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": line.unit_price,
                "total_price": line.total_price,
            }
            for line in self._lines.values()
        ]
