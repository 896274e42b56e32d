"""Branch shortages service"""
