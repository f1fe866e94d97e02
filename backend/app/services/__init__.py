# Services package init
"""
EstateHub Backend — Services Layer
====================================

What:  Business logic between routes (HTTP) and the ORM (persistence).

Service Inventory:
    - ResidencyService: create/list/fetch listings
    - UserService: registration, visit bookings, favorites

Services never touch HTTP objects; they raise app.exceptions types and the
global handlers in main.py choose the status code.
"""
