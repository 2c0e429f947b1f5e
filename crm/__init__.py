"""Real-estate CRM backend: property listings, roles and users over JSON collections."""
