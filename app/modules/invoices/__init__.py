"""
Invoices module: sales invoices, their line items and customer payments.
"""
