"""Price calculator service.

Holds a process-wide base price and tax rate and serves endpoints to update
them and to compute the resulting total price.
"""
