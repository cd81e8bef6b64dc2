"""
Storefront Platform - Backend API
Multi-tenant link-in-bio storefronts for sellers
"""
