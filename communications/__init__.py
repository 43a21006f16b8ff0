"""
COMMUNICATIONS App - Transactional email for Courier Express

- Resend API client
- Shipment and quote notification templates
- Email log for the admin dashboard
"""
