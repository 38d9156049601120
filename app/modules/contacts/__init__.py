"""
Contacts module: customers (invoiced parties) and suppliers (purchase parties).

- models.py: Customer and Supplier tables
- schemas.py: request/response models
- service.py: CRUD, search and supplier pending payments
- router.py: customers_router and suppliers_router
- tests.py: API tests
"""
