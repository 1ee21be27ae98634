"""
Catalog services.

`region_invariants` holds the pure validation rules for the region aggregate;
`region_catalog_service` applies them inside one transaction per operation.
"""
