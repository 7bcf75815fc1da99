from django.db import models


# The tables are created by the provisioner with raw DDL, so Django never
# manages them. Table names resolve through the `simple` search path.


class Customer(models.Model):
    """Customer table - referenced by orders."""
    id = models.BigIntegerField(primary_key=True)
    description = models.TextField(null=True)

    class Meta:
        managed = False
        db_table = 'customer'

    def __str__(self):
        return f'Customer {self.id}'


class Order(models.Model):
    id = models.BigIntegerField(primary_key=True)
    order_description = models.TextField(null=True)
    customer = models.ForeignKey(
        Customer,
        on_delete=models.DO_NOTHING,
        null=True,
        db_column='customer_id',
        related_name='orders',
    )

    class Meta:
        managed = False
        db_table = 'order'

    def __str__(self):
        return f'Order {self.id}'


class Item(models.Model):
    id = models.BigIntegerField(primary_key=True)
    item_description = models.TextField(null=True)
    order = models.ForeignKey(
        Order,
        on_delete=models.DO_NOTHING,
        null=True,
        db_column='order_id',
        related_name='items',
    )

    class Meta:
        managed = False
        db_table = 'item'

    def __str__(self):
        return f'Item {self.id}'
