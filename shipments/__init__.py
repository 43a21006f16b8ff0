"""
SHIPMENTS App - Shipments, tracking history and carriers for Courier Express

- Admin CRUD for shipments and carriers
- Status updates with append-only tracking events
- Public tracking by code with map progress
"""
