"""
HTTP layer: route binding, error decoding and Gluon authentication.
"""
