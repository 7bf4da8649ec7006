"""
Order Session Step Definitions.

This module defines the SessionStep enum representing the steps of the
order-building conversation. Having no session at all is the implicit idle
state; completing or cancelling an order removes the session.
"""

from enum import Enum


class SessionStep(str, Enum):
    """Steps of the order-building conversation."""
    WAITING_CLIENT = "esperando_cliente"  # Waiting for a client name to search
    SELECTING_CLIENT = "seleccionando_cliente"  # Client options shown, waiting for a pick
    WAITING_PRODUCTS = "esperando_productos"  # Waiting for the product list
    VERIFYING_STOCK = "verificando_stock"  # Walking the pending lines one by one
    WAITING_QUANTITY = "esperando_cantidad"  # Waiting for a new quantity for a line
    RETRYING_PRODUCT = "reintentando_producto"  # Waiting for a new search text for a line
    ADDING_PRODUCTS = "agregando_productos"  # Waiting for more products after the summary
    WAITING_SPECIAL_PRICE = "esperando_precio_especial"  # Waiting for a typed unit price
    CONFIRMING_PRICES = "confirmar_precios"  # Summary shown, waiting for a decision
    WAITING_NOTE = "esperando_nota"  # Waiting for an optional order note
