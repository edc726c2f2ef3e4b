"""Juice delivery bot: turns drivers' delivery messages into recorded orders."""
