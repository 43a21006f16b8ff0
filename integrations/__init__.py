"""
INTEGRATIONS App - Third-party services for Courier Express

- Mapbox geocoding proxy
- Cloudinary package image uploads
"""
