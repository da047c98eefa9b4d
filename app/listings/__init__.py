"""
Listings app.

Listing storage and search live elsewhere; this app keeps the slice of a
listing that booking and payment need: owner, price and availability flags.
"""
