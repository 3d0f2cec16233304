"""Creatly: storefront, order fulfilment and entitlement service for online schools."""
