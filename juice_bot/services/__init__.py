"""
Services Package for Juice Bot
==============================

This package contains service modules that encapsulate business logic
behind the HTTP routes.

Available Services:
-------------------
- **deliveries**: Records parsed orders as priced deliveries and returns,
  and builds the confirmation text sent back to the driver

Usage:
------
    from juice_bot.services.deliveries import record_orders, format_delivery_message
"""
