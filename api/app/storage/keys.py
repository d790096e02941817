"""Logical keys of the persisted state."""

USER = "smartorder_user"
SHOPS = "smartorder_shops"
MENUS = "smartorder_menus"
RESERVATIONS = "smartorder_reservations"
TABLES = "smartorder_tables"
ORDERS = "smartorder_orders"
