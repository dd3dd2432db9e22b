"""
Sales app: cart, VAT breakdown, stock reservations and sale commits
for the store point of sale.
"""
