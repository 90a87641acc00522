"""
kilroy - Leave a photo where you are, see what others left there

A location-based sharing app with:
- Place resolution from coordinates (nearby place, reverse geocode, coordinates)
- Client-side image normalization before upload
- Photo storage in Google Cloud Storage
- Post documents in DuckDB
- Community and verified-human circles
"""

__version__ = "0.1.0"
__author__ = "kilroy"
__description__ = "Location-based photo drops with verified-human circles"
