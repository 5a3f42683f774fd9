"""auth/ -- Authentication package for ShopSession.

Layer rule: auth/ may import from core/ and sessions/.
It does NOT import from api/ or cart/.
api/ and cart/ import from auth/, not the other way around.
"""
