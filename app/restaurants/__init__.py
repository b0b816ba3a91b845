"""
Restaurant list endpoints built on restaurant_service.
"""
