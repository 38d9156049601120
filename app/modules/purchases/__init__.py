"""
Purchases module: supplier purchases, their line items and supplier payments.

Mirrors invoices except that stock is added on purchase and line prices
default to the product's cost price.
"""
